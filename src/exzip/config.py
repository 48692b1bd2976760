# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import configparser
from dataclasses import dataclass, fields, replace

from exzip.errors import ConfigurationError
from exzip.utils.config_parser import parse_config_file
from exzip.utils.prefix import EXISTING_REJECT, EXISTING_REPLACE

EXEC_MODES = {"all": 0o111, "owner": 0o100}


@dataclass(frozen=True)
class ExecutableConfig:
    """
    Options for one run, built once and passed along explicitly.
    """

    flags: str = ""
    script_file: str | None = None
    input_file: str | None = None
    program_file: str | None = None
    attach_program_file: bool = False
    program_file_type: str = "sh"
    classifier: str | None = None
    artifact_type: str = "jar"
    allow_other_types: bool = False
    exec_mode: int = 0o111
    existing_preamble: str = EXISTING_REPLACE

    def __post_init__(self):
        if self.existing_preamble not in (EXISTING_REPLACE, EXISTING_REJECT):
            raise ConfigurationError(
                f"existing_preamble must be {EXISTING_REPLACE} or {EXISTING_REJECT}, "
                f"not {self.existing_preamble!r}"
            )
        parse_exec_mode(self.exec_mode)

    @classmethod
    def from_mapping(cls, values):
        """
        Build a config from string (config file) or typed (pyproject) values.
        Keys may use dashes or underscores, empty strings mean unset.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = key.replace("-", "_")
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            if value is None or value == "":
                continue
            kwargs[name] = _convert(name, value)
        return cls(**kwargs)

    def merge(self, **overrides):
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _convert(name, value):
    if name in ("attach_program_file", "allow_other_types"):
        if isinstance(value, bool):
            return value
        state = configparser.ConfigParser.BOOLEAN_STATES.get(str(value).lower())
        if state is None:
            raise ConfigurationError(f"{name} expects a boolean, got {value!r}")
        return state
    if name == "exec_mode":
        return parse_exec_mode(value)
    return str(value)


def parse_exec_mode(value):
    if isinstance(value, int):
        mode = value
    elif value in EXEC_MODES:
        mode = EXEC_MODES[value]
    else:
        try:
            mode = int(value, 8)
        except ValueError:
            raise ConfigurationError(
                f"exec_mode expects all, owner or an octal mask, got {value!r}"
            )
    if not mode or mode & ~0o111:
        raise ConfigurationError(f"exec_mode {mode:#o} is not a set of execute bits")
    return mode


def load_config(config_path):
    config = parse_config_file(config_path)
    if config is None:
        raise ConfigurationError(f"Unable to find config file: {config_path}")
    return ExecutableConfig.from_mapping(config.my_items())

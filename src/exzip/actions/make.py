# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from exzip.errors import ArchiveIOError, ConfigurationError, ExecutablePermissionError
from exzip.utils.console import debug, info
from exzip.utils.preamble import build_preamble
from exzip.utils.prefix import apply_prefix


@dataclass(frozen=True)
class Artifact:
    path: Path
    type: str
    classifier: str | None = None

    @classmethod
    def from_path(cls, path, classifier=None):
        path = Path(path)
        return cls(path, path.suffix.lstrip("."), classifier)


def should_process(artifact, config):
    debug(f"Considering {artifact}")
    if artifact is None:
        return False

    if not config.allow_other_types and artifact.type != config.artifact_type:
        return False

    return config.classifier is None or config.classifier == artifact.classifier


def select_files(config, artifacts):
    if config.input_file is not None:
        input_file = Path(config.input_file)
        if not input_file.exists():
            raise ArchiveIOError(f"Unable to find {input_file}")
        return [input_file]

    return [artifact.path for artifact in artifacts if should_process(artifact, config)]


def make_executable(config, artifacts=(), attach=None, extra_sources=()):
    """
    Make the selected artifacts executable. Return the paths written.

    With a program_file set, the single candidate is copied to that name
    next to it and only the copy is made executable; attach(path, type) is
    then called when attach_program_file asks for it.
    """
    files = select_files(config, artifacts)
    if not files:
        raise ConfigurationError("Could not find any archives to make executable")

    if config.program_file and config.program_file.strip():
        if len(files) > 1:
            raise ConfigurationError(
                "program_file set, but multiple candidate artifacts found: "
                + ", ".join(map(str, files))
            )

        file = files[0]
        exec_path = file.parent.joinpath(config.program_file)
        if exec_path.exists():
            raise ArchiveIOError("Program file already exists", exec_path)
        try:
            shutil.copyfile(file, exec_path)
        except OSError as e:
            raise ArchiveIOError(f"Unable to copy {file}", exec_path, e) from e
        try:
            # The preamble script may live inside the original archive
            make_file_executable(exec_path, config, extra_sources, source_path=file)
        except ExecutablePermissionError:
            # content is committed, only the mode bits are missing
            raise
        except Exception:
            # no unprefixed copy left behind under the program name
            exec_path.unlink(missing_ok=True)
            raise
        if config.attach_program_file and attach is not None:
            attach(exec_path, config.program_file_type)
        return [exec_path]

    for file in files:
        make_file_executable(file, config, extra_sources)
    return files


def make_file_executable(file, config, extra_sources=(), source_path=None):
    debug(f"Making {os.path.abspath(file)} executable")
    preamble = build_preamble(config, source_path or file, extra_sources)
    apply_prefix(
        file,
        preamble,
        exec_mode=config.exec_mode,
        existing=config.existing_preamble,
    )
    info(f"Successfully made {os.path.abspath(file)} executable")

# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import configparser
import io

from exzip.data import DEFAULT_CONFIG


class KeyValueParser(configparser.ConfigParser):
    """Simple parser based on ConfigParser.
    Reads a file containing key/value pairs and/or comments, without any
    section header. Values can span multiple lines, as long as they are
    indented deeper than the first line of the value.
    """

    def __init__(self, *args, **kwargs):
        # Set defaults if not specified by user
        if "interpolation" not in kwargs:
            kwargs["interpolation"] = None
        if "allow_no_value" not in kwargs:
            kwargs["allow_no_value"] = True
        if "comment_prefixes" not in kwargs:
            kwargs["comment_prefixes"] = "#"

        super().__init__(*args, **kwargs)

        # Dummy section name
        self._section_name = "a"

    # TODO: can I create a solution which not depends on the internal _read method?
    def _read(self, fp, fpname):
        # Prepend a dummy section header
        lines = io.StringIO(f"[{self._section_name}]\n" + fp.read())
        return super()._read(lines, fpname)

    def read_default_string(self, string, source="<string>"):
        return super()._read(io.StringIO("[DEFAULT]\n" + string), source)

    def my_items(self):
        if not self.has_section(self._section_name):
            return dict(self.defaults())
        return dict(self.items(self._section_name))


def parse_config_file(config_path):
    """
    Return the key/values of config_path, with defaults for missing keys.
    Return None if the file doesn't exist.
    """
    config = KeyValueParser()
    # Read default config to fallback to default values
    # for keys not found in the config_path file
    config.read_default_string(DEFAULT_CONFIG)
    try:
        with open(config_path, "r") as fp:
            config.read_file(fp)
        return config
    except FileNotFoundError:
        return

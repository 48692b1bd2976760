# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
import stat

from exzip import archive
from exzip.errors import ArchiveIOError, ExecutablePermissionError, FormatError
from exzip.utils.console import debug
from exzip.utils.files import add_mode_bits, replace_file

EXISTING_REPLACE = "replace"
EXISTING_REJECT = "reject"


def apply_prefix(path, preamble_parts, exec_mode=0o111, existing=EXISTING_REPLACE):
    """
    Write preamble_parts in front of the zip archive at path, patch the
    archive's offsets to match and set the execute bits.

    The file at path is either fully replaced or left untouched. Only a
    failure to set the execute bits happens after the replacement; it is
    raised as ExecutablePermissionError.
    """
    path = os.fspath(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
        original_mode = stat.S_IMODE(os.stat(path).st_mode)
    except OSError as e:
        raise ArchiveIOError("Unable to read archive", path, e) from e

    preamble = b"".join(preamble_parts)

    try:
        old_preamble, payload = archive.split_preamble(data)
        if old_preamble:
            if existing == EXISTING_REJECT:
                raise FormatError(
                    f"Archive already starts with a {len(old_preamble)} byte preamble"
                )
            debug(f"Replacing {len(old_preamble)} byte preamble of {path}")
        patched = archive.rewrite(payload, len(preamble))
    except FormatError as e:
        if e.path is None:
            e.path = path
        raise

    try:
        replace_file(path, [preamble, patched], mode=original_mode)
    except OSError as e:
        raise ArchiveIOError("Failed to apply prefix to archive", path, e) from e

    try:
        add_mode_bits(path, exec_mode)
    except OSError as e:
        raise ExecutablePermissionError(
            "Could not make archive executable", path, e
        ) from e

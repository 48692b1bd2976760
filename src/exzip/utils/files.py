# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
import stat
import tempfile


def stat_chmod(file_path, mode):
    """
    Change mode if file doesn't already have this mode.
    """
    if mode != stat.S_IMODE(os.stat(file_path).st_mode):
        os.chmod(file_path, mode)


def add_mode_bits(file_path, bits):
    """
    Add permission bits, keeping the ones already set.
    """
    stat_chmod(file_path, stat.S_IMODE(os.stat(file_path).st_mode) | bits)


def is_executable(file_path):
    return bool(stat.S_IMODE(os.stat(file_path).st_mode) & 0o111)


def replace_file(file_path, chunks, mode=None):
    """
    Write chunks to a temporary file next to file_path, then move it over
    file_path. Readers see either the old or the new content, never a
    partial write. The temporary file is removed if anything fails.
    """
    directory, name = os.path.split(os.path.abspath(file_path))
    fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, file_path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        raise

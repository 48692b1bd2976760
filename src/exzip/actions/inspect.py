# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

from exzip import archive
from exzip.errors import ArchiveIOError, FormatError
from exzip.utils.files import is_executable


def inspect_archive(path):
    """
    Show the preamble and index summary of an archive.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ArchiveIOError("Unable to read archive", path, e) from e

    try:
        layout = archive.read_layout(data)
    except FormatError as e:
        e.path = path
        raise

    preamble = data[: layout.start]
    print(f"file:       {path}")
    print(f"preamble:   {len(preamble)} bytes")
    if preamble.startswith(b"#!"):
        print(f"shebang:    {preamble.splitlines()[0].decode(errors='replace')}")
    print(f"entries:    {layout.entry_count}")
    print(f"zip64:      {'yes' if layout.zip64 else 'no'}")
    # Non-zero when the offsets were left relative to the zip data
    print(f"unpatched:  {layout.concat} bytes")
    print(f"executable: {'yes' if is_executable(path) else 'no'}")
    return 0

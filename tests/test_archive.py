# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import io
import struct
import zipfile

import pytest
from conftest import CONTENTS, eocd_cd_offset, read_all, zip64_bytes, zip_bytes

from exzip import archive
from exzip.errors import FormatError
from exzip.utils.preamble import default_preamble


def header_offsets(data):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [info.header_offset for info in zf.infolist()]


def test_default_preamble_shifts_end_record():
    data = zip_bytes()
    assert eocd_cd_offset(data) == 0x1000

    preamble = b"".join(default_preamble(""))
    assert preamble == b'#!/bin/sh\n\nexec java  -jar "$0" "$@"\n\n'

    output = preamble + archive.rewrite(data, len(preamble))
    assert output[: len(preamble)] == preamble
    assert eocd_cd_offset(output) == 0x1000 + len(preamble)


def test_local_header_offsets_shifted():
    data = zip_bytes(compression=zipfile.ZIP_DEFLATED)
    before = header_offsets(data)

    output = b"x" * 123 + archive.rewrite(data, 123)

    assert header_offsets(output) == [offset + 123 for offset in before]
    assert archive.read_layout(output).concat == 0


def test_entries_survive():
    data = zip_bytes(compression=zipfile.ZIP_DEFLATED)
    preamble = b"#!/bin/sh\nexit 0\n\n"

    output = preamble + archive.rewrite(data, len(preamble))

    assert read_all(output) == CONTENTS
    # skipping the preamble gives back the original archive bytes apart from offsets
    assert len(output) - len(preamble) == len(data)


def test_zero_shift_is_identity():
    data = zip_bytes()
    assert archive.rewrite(data, 0) == data


def test_negative_shift():
    with pytest.raises(ValueError):
        archive.rewrite(zip_bytes(), -1)


def test_archive_comment():
    comment = b"built by the release job " * 100
    data = zip_bytes(comment=comment)

    layout = archive.read_layout(data)
    assert layout.comment_length == len(comment)

    output = b"#!/bin/sh\n\n" + archive.rewrite(data, 11)
    with zipfile.ZipFile(io.BytesIO(output)) as zf:
        assert zf.comment == comment
        assert zf.read("f3") == CONTENTS["f3"]


def test_end_signature_inside_comment():
    data = zip_bytes()
    comment = b"PK\x05\x06" + b"\xff" * 40
    end = data.rfind(b"PK\x05\x06")
    commented = bytearray(data + comment)
    struct.pack_into("<H", commented, end + 20, len(comment))

    layout = archive.read_layout(bytes(commented))

    assert layout.eocd_position == end
    assert layout.entry_count == 10


def test_empty_archive():
    data = zip_bytes(contents={})
    layout = archive.read_layout(data)
    assert layout.entry_count == 0
    assert layout.start == 0

    output = b"abc" + archive.rewrite(data, 3)
    assert archive.preamble_length(output) == 3
    assert read_all(output) == {}


def test_no_end_record():
    with pytest.raises(FormatError):
        archive.rewrite(b"#!/bin/sh\necho not a zip\n" * 10, 5)


def test_end_record_outside_trailing_window():
    data = zip_bytes(contents={"a": b"a"})
    with pytest.raises(FormatError):
        archive.read_layout(data + b"\0" * 0x10000)


def test_truncated_central_directory():
    data = zip_bytes()
    end = data.rfind(b"PK\x05\x06")
    broken = data[: end - 10] + data[end:]
    with pytest.raises(FormatError):
        archive.rewrite(broken, 10)


def test_local_header_offset_out_of_range():
    data = bytearray(zip_bytes())
    central = data.find(b"PK\x01\x02")
    struct.pack_into("<L", data, central + 42, len(data))
    with pytest.raises(FormatError):
        archive.rewrite(bytes(data), 10)


def test_entry_count_mismatch():
    data = bytearray(zip_bytes())
    end = data.rfind(b"PK\x05\x06")
    struct.pack_into("<2H", data, end + 8, 11, 11)
    with pytest.raises(FormatError):
        archive.read_layout(bytes(data))


def test_multi_disk():
    data = bytearray(zip_bytes())
    end = data.rfind(b"PK\x05\x06")
    struct.pack_into("<H", data, end + 4, 1)
    with pytest.raises(FormatError):
        archive.read_layout(bytes(data))


def test_32bit_overflow_without_zip64():
    with pytest.raises(FormatError):
        archive.rewrite(zip_bytes(), 0xFFFFFFFF)


def test_zip64_offsets_shifted():
    data = zip64_bytes()
    layout = archive.read_layout(data)
    assert layout.zip64
    assert layout.entry_count == 1

    output = b"#" * 50 + archive.rewrite(data, 50)

    end = output.rfind(b"PK\x05\x06")
    # the 32 bit sentinel stays in place
    assert struct.unpack_from("<L", output, end + 16)[0] == 0xFFFFFFFF
    locator = end - 20
    record_offset = struct.unpack_from("<Q", output, locator + 8)[0]
    assert output[record_offset : record_offset + 4] == b"PK\x06\x06"
    cd_offset = struct.unpack_from("<Q", output, record_offset + 48)[0]
    assert output[cd_offset : cd_offset + 4] == b"PK\x01\x02"
    assert struct.unpack_from("<L", output, cd_offset + 42)[0] == 0xFFFFFFFF
    assert struct.unpack_from("<Q", output, output.rfind(b"\x01\x00\x08\x00") + 4)[0] == 50

    assert read_all(output) == {"a.txt": b"hello"}


def test_zip64_extra_missing():
    data = bytearray(zip64_bytes())
    extra = data.rfind(b"\x01\x00\x08\x00")
    data[extra : extra + 2] = b"\x99\x99"
    with pytest.raises(FormatError):
        archive.read_layout(bytes(data))


def test_unpatched_prefix_is_folded_in():
    data = zip_bytes()
    # a prefix written without touching the offsets
    concatenated = b"#!/usr/bin/env python3\n" + data
    layout = archive.read_layout(concatenated)
    assert layout.concat == 23
    assert layout.start == 23

    output = b"12345" + archive.rewrite(concatenated, 5)
    assert archive.read_layout(output).concat == 0
    assert archive.preamble_length(output) == 28
    assert read_all(output) == CONTENTS


def test_split_preamble():
    data = zip_bytes()
    preamble = b"#!/bin/sh\n\nexit 1\n\n"
    prefixed = preamble + archive.rewrite(data, len(preamble))

    old, payload = archive.split_preamble(prefixed)

    assert old == preamble
    assert payload == data

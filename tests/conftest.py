# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import io
import struct
import zipfile
import zlib

import pytest

CONTENTS = {f"f{i}": bytes([65 + i]) * (378 if i < 9 else 374) for i in range(10)}


def zip_bytes(contents=CONTENTS, compression=zipfile.ZIP_STORED, comment=b""):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as zf:
        for name, data in contents.items():
            zf.writestr(name, data)
        zf.comment = comment
    return buffer.getvalue()


def zip64_bytes(name=b"a.txt", content=b"hello"):
    """
    A one entry archive using the zip64 end records and a zip64 extra
    field for the local header offset.
    """
    crc = zlib.crc32(content)
    local = struct.pack(
        "<4s5H3L2H", b"PK\x03\x04", 45, 0, 0, 0, 0x21, crc,
        len(content), len(content), len(name), 0,
    ) + name + content
    extra = struct.pack("<HHQ", 1, 8, 0)
    central = struct.pack(
        "<4s4B4HL2L5H2L", b"PK\x01\x02", 45, 3, 45, 0, 0, 0, 0, 0x21, crc,
        len(content), len(content), len(name), len(extra), 0, 0, 0, 0,
        0xFFFFFFFF,
    ) + name + extra
    cd_offset = len(local)
    record_offset = cd_offset + len(central)
    record = struct.pack(
        "<4sQ2H2L4Q", b"PK\x06\x06", 44, 45, 45, 0, 0, 1, 1,
        len(central), cd_offset,
    )
    locator = struct.pack("<4sLQL", b"PK\x06\x07", 0, record_offset, 1)
    end = struct.pack(
        "<4s4H2LH", b"PK\x05\x06", 0, 0, 0xFFFF, 0xFFFF,
        0xFFFFFFFF, 0xFFFFFFFF, 0,
    )
    return local + central + record + locator + end


def eocd_cd_offset(data):
    position = data.rfind(b"PK\x05\x06")
    return struct.unpack_from("<L", data, position + 16)[0]


def read_all(data):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert zf.testzip() is None
        return {info.filename: zf.read(info) for info in zf.infolist()}


@pytest.fixture
def jar(tmp_path):
    path = tmp_path / "app.jar"
    path.write_bytes(zip_bytes(compression=zipfile.ZIP_DEFLATED))
    path.chmod(0o644)
    return path

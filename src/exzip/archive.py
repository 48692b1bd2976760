# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

"""Locate and patch the absolute offsets recorded in a zip archive.

A zip reader finds its entries through the trailing index: the end of
central directory record (EOCD) points at the central directory, and each
central directory entry points at its local file header. Those pointers are
byte offsets from the start of the file, so bytes inserted in front of the
archive invalidate all of them. Local headers, payloads and checksums carry
no absolute offsets and are never touched.

Some writers (zipapp with an interpreter line, or a plain `cat` of a script
and a zip) leave offsets relative to the start of the zip data instead. The
number of leading bytes the offsets don't account for is the concatenation
offset; every rewrite folds it in, so the output always holds offsets
absolute from the start of the file.
"""

import struct
from dataclasses import dataclass, field

from exzip.errors import FormatError

EOCD_SIGNATURE = b"PK\x05\x06"
ZIP64_LOCATOR_SIGNATURE = b"PK\x06\x07"
ZIP64_RECORD_SIGNATURE = b"PK\x06\x06"
CENTRAL_SIGNATURE = b"PK\x01\x02"
LOCAL_SIGNATURE = b"PK\x03\x04"

EOCD_SIZE = 22
ZIP64_LOCATOR_SIZE = 20
ZIP64_RECORD_SIZE = 56
CENTRAL_SIZE = 46
LOCAL_SIZE = 30
MAX_COMMENT_SIZE = 0xFFFF

ZIP64_EXTRA_ID = 0x0001
ZIP64_SENTINEL = 0xFFFFFFFF

# sig, disk, cd disk, disk entries, total entries, cd size, cd offset, comment length
_EOCD = struct.Struct("<4s4H2LH")
# sig, disk with record, record offset, total disks
_ZIP64_LOCATOR = struct.Struct("<4sLQL")
# sig, record size, made by, needed, disk, cd disk, disk entries, total entries, cd size, cd offset
_ZIP64_RECORD = struct.Struct("<4sQ2H2L4Q")

_FIELD_FORMATS = {4: "<L", 8: "<Q"}


@dataclass(frozen=True)
class OffsetField:
    position: int
    width: int
    value: int
    # a 4 byte field backed by a zip64 copy may overflow to the sentinel
    overflow_to_zip64: bool = False


@dataclass
class ArchiveLayout:
    eocd_position: int
    cd_start: int
    cd_size: int
    entry_count: int
    concat: int
    start: int
    zip64: bool = False
    comment_length: int = 0
    fields: list = field(default_factory=list)


def find_end_record(data):
    """
    Return the position of the end of central directory record.

    The record may be followed by a comment of up to 64 KiB, so the search
    covers that whole trailing window. A candidate is only accepted when its
    comment length ends exactly at the end of the data.
    """
    floor = max(0, len(data) - EOCD_SIZE - MAX_COMMENT_SIZE)
    position = data.rfind(EOCD_SIGNATURE, floor)
    while position >= 0:
        if position + EOCD_SIZE <= len(data):
            (comment_length,) = struct.unpack_from("<H", data, position + 20)
            if position + EOCD_SIZE + comment_length == len(data):
                return position
        position = data.rfind(EOCD_SIGNATURE, floor, position)
    raise FormatError("end of central directory record not found")


def _find_zip64_record(data, locator_position, record_offset):
    # Usually the record sits right before the locator; with extensible
    # data it is larger and only the stored offset can find it.
    for position in (locator_position - ZIP64_RECORD_SIZE, record_offset):
        if 0 <= position and position + ZIP64_RECORD_SIZE <= locator_position:
            if data[position : position + 4] == ZIP64_RECORD_SIGNATURE:
                (size,) = struct.unpack_from("<Q", data, position + 4)
                if position + 12 + size == locator_position:
                    return position
    raise FormatError("zip64 end of central directory record not found")


def _zip64_offset_position(data, extra_start, extra_length, compressed, uncompressed):
    """
    Return the position of the local header offset inside the zip64 extra
    field of a central directory entry.
    """
    position = extra_start
    end = extra_start + extra_length
    while position + 4 <= end:
        block_id, block_size = struct.unpack_from("<HH", data, position)
        if block_id == ZIP64_EXTRA_ID:
            offset_position = position + 4
            # sizes come first, and only when their 32 bit field is the sentinel
            if uncompressed == ZIP64_SENTINEL:
                offset_position += 8
            if compressed == ZIP64_SENTINEL:
                offset_position += 8
            if offset_position + 8 > position + 4 + block_size:
                raise FormatError("zip64 extra field has no local header offset")
            return offset_position
        position += 4 + block_size
    raise FormatError("local header offset needs a zip64 extra field, none found")


def read_layout(data):
    """
    Parse the index structures of a zip archive and collect every absolute
    offset field they hold.
    """
    eocd = find_end_record(data)
    (
        _,
        disk,
        cd_disk,
        disk_entries,
        entry_count,
        cd_size,
        cd_offset,
        comment_length,
    ) = _EOCD.unpack_from(data, eocd)

    fields = []
    cd_end = eocd
    locator = eocd - ZIP64_LOCATOR_SIZE
    zip64 = locator >= 0 and data[locator : locator + 4] == ZIP64_LOCATOR_SIGNATURE

    if zip64:
        _, locator_disk, record_offset, disks = _ZIP64_LOCATOR.unpack_from(data, locator)
        if locator_disk != 0 or disks > 1:
            raise FormatError("multi-disk archives are not supported")
        record = _find_zip64_record(data, locator, record_offset)
        (
            _,
            _,
            _,
            _,
            disk,
            cd_disk,
            disk_entries,
            entry_count,
            cd_size,
            cd_offset64,
        ) = _ZIP64_RECORD.unpack_from(data, record)
        fields.append(OffsetField(locator + 8, 8, record_offset))
        fields.append(OffsetField(record + 48, 8, cd_offset64))
        if cd_offset != ZIP64_SENTINEL:
            fields.append(OffsetField(eocd + 16, 4, cd_offset, overflow_to_zip64=True))
        cd_offset = cd_offset64
        cd_end = record
    else:
        fields.append(OffsetField(eocd + 16, 4, cd_offset))

    if disk != 0 or cd_disk != 0 or disk_entries != entry_count:
        raise FormatError("multi-disk archives are not supported")

    concat = cd_end - cd_size - cd_offset
    if concat < 0:
        raise FormatError(
            f"central directory at {cd_offset:#x} (size {cd_size}) runs past byte {cd_end}"
        )
    cd_start = concat + cd_offset
    if zip64 and concat + record_offset != cd_end:
        raise FormatError("zip64 locator does not point at the zip64 end record")

    headers = []
    position = cd_start
    while position < cd_end:
        if (
            position + CENTRAL_SIZE > cd_end
            or data[position : position + 4] != CENTRAL_SIGNATURE
        ):
            raise FormatError(f"bad central directory entry at byte {position}")
        compressed, uncompressed, name_length, extra_length, comment = struct.unpack_from(
            "<2L3H", data, position + 20
        )
        (header_offset,) = struct.unpack_from("<L", data, position + 42)
        extra_start = position + CENTRAL_SIZE + name_length
        next_position = extra_start + extra_length + comment
        if next_position > cd_end:
            raise FormatError(f"central directory entry at byte {position} is truncated")

        if header_offset == ZIP64_SENTINEL:
            field_position = _zip64_offset_position(
                data, extra_start, extra_length, compressed, uncompressed
            )
            (header_offset,) = struct.unpack_from("<Q", data, field_position)
            fields.append(OffsetField(field_position, 8, header_offset))
        else:
            fields.append(OffsetField(position + 42, 4, header_offset))

        local = concat + header_offset
        if (
            local + LOCAL_SIZE > cd_start
            or data[local : local + 4] != LOCAL_SIGNATURE
        ):
            raise FormatError(
                f"entry {len(headers)} points at byte {local}, no local file header there"
            )
        headers.append(local)
        position = next_position

    if len(headers) != entry_count:
        raise FormatError(
            f"central directory holds {len(headers)} entries, end record says {entry_count}"
        )

    return ArchiveLayout(
        eocd_position=eocd,
        cd_start=cd_start,
        cd_size=cd_size,
        entry_count=entry_count,
        concat=concat,
        start=min(headers) if headers else cd_start,
        zip64=zip64,
        comment_length=comment_length,
        fields=fields,
    )


def _relocate(data, layout, delta, cut=0):
    buffer = bytearray(data[cut:])
    for offset_field in layout.fields:
        value = offset_field.value + delta
        if value < 0:
            raise FormatError(f"offset {offset_field.value:#x} would move before the file start")
        if offset_field.width == 4 and value >= ZIP64_SENTINEL:
            if not offset_field.overflow_to_zip64:
                raise FormatError(
                    f"offset {value:#x} does not fit a 32-bit field and the archive has no zip64 record"
                )
            value = ZIP64_SENTINEL
        elif value >= 1 << (offset_field.width * 8):
            raise FormatError(f"offset {value:#x} does not fit a 64-bit field")
        struct.pack_into(
            _FIELD_FORMATS[offset_field.width], buffer, offset_field.position - cut, value
        )
    return bytes(buffer)


def rewrite(data, shift):
    """
    Return the archive with every absolute offset moved by `shift` bytes,
    ready to have `shift` bytes written in front of it.
    """
    if shift < 0:
        raise ValueError(f"shift must not be negative, got {shift}")
    layout = read_layout(data)
    return _relocate(data, layout, layout.concat + shift)


def split_preamble(data):
    """
    Split leading bytes off an archive. The returned archive has its offsets
    rebased so it is valid on its own.
    """
    layout = read_layout(data)
    start = layout.start
    return data[:start], _relocate(data, layout, layout.concat - start, cut=start)


def preamble_length(data):
    return read_layout(data).start

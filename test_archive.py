#!/usr/bin/env python3
"""Test the dump file container."""

import struct

import pytest

from smbios_decoder.archive import (
    ARCHIVE_HEADER_SIZE,
    pack_archive,
    read_archive,
    serialize_structures,
    unpack_archive,
    write_archive,
)
from smbios_decoder.discovery.entry_point import EntryPoint, EntryPointKind
from smbios_decoder.discovery.table_walker import StopReason, decode_table, walk_structures
from smbios_decoder.errors import ArchiveFormatError, NotFoundError, SMBIOSError


def sample_table():
    return (
        bytes([0x01, 0x08, 0x01, 0x00, 0x01, 0x02, 0x00, 0x00])  # type 1, length 8, handle 1
        + b"Acme\x00Widget\x00\x00"
        + bytes([0x09, 0x05, 0x09, 0x00, 0xAA])                  # type 9, no strings
        + b"\x00\x00"
        + bytes([0x7F, 0x04, 0xFF, 0xFF])                        # End-of-Table
        + b"\x00\x00"
    )


def sample_result(kind=EntryPointKind.SIXTY_FOUR_BIT):
    ep = EntryPoint(
        kind=kind,
        major_version=3,
        minor_version=5,
        revision=0 if kind is EntryPointKind.SIXTY_FOUR_BIT else None,
        table_address=0x000000007B0A1000,
    )
    return decode_table(ep, sample_table())


def test_header_layout():
    """Test the fixed 28-byte header."""
    print("Testing dump file header...")

    data = pack_archive(sample_result())
    assert ARCHIVE_HEADER_SIZE == 28
    assert data[0:9] == b"SMBIOSRAW", "Magic mismatch"
    assert data[9] == 1, "Format version"
    assert data[10] == 1, "64-bit kind flag"
    assert (data[11], data[12], data[13]) == (3, 5, 0), "Version bytes"
    assert data[14] == 0 and data[27] == 0, "Reserved and padding bytes"
    assert struct.unpack_from("<I", data, 15)[0] == len(sample_table())
    assert struct.unpack_from("<Q", data, 19)[0] == 0x7B0A1000
    assert data[28:] == sample_table(), "Table rebuilt byte for byte"
    print("  ✓ Header layout matches")


def test_serialize_structures():
    """Strings are NUL-terminated plus one NUL; no strings gives two NULs."""
    structures = walk_structures(sample_table())
    assert serialize_structures(structures) == sample_table()
    assert serialize_structures([]) == b""


def test_round_trip(tmp_path):
    """Test writing and reading back a dump file."""
    print("\nTesting dump file round trip...")

    original = sample_result()
    path = write_archive(original, tmp_path / "nested" / "system.smbios")
    assert path.exists()

    restored = read_archive(path)
    assert restored.structures == original.structures
    assert restored.stop_reason is StopReason.END_OF_TABLE
    assert restored.entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT
    assert restored.entry_point.version_string == "SMBIOS 3.5.0"
    assert restored.entry_point.table_address == 0x7B0A1000
    assert restored.entry_point.max_table_size == len(sample_table())
    print("  ✓ Round trip preserves structures")


def test_round_trip_32_bit():
    restored = unpack_archive(pack_archive(sample_result(EntryPointKind.THIRTY_TWO_BIT)))
    assert restored.entry_point.kind is EntryPointKind.THIRTY_TWO_BIT
    assert restored.entry_point.table_length == len(sample_table())
    assert restored.entry_point.version_string == "SMBIOS 3.5"
    assert [s.type for s in restored.structures] == [1, 9, 127]


def test_bad_magic():
    data = bytearray(pack_archive(sample_result()))
    data[0:9] = b"NOTSMBIOS"
    with pytest.raises(ArchiveFormatError, match="magic"):
        unpack_archive(bytes(data))


def test_unknown_version():
    data = bytearray(pack_archive(sample_result()))
    data[9] = 2
    with pytest.raises(ArchiveFormatError, match="version"):
        unpack_archive(bytes(data))


def test_short_inputs():
    """Short headers and short tables are rejected."""
    data = pack_archive(sample_result())
    with pytest.raises(ArchiveFormatError):
        unpack_archive(data[:27])
    with pytest.raises(ArchiveFormatError):
        unpack_archive(data[:-1])
    # Archive errors are decoder errors
    with pytest.raises(SMBIOSError):
        unpack_archive(b"")


def test_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        read_archive(tmp_path / "absent.smbios")


def test_directory_instead_of_file(tmp_path):
    with pytest.raises(NotFoundError):
        read_archive(tmp_path)

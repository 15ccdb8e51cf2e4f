#!/usr/bin/env python3
"""Test SMBIOS acquisition from sysfs files and firmware table blobs."""

import struct
from pathlib import Path

import pytest

from smbios_decoder.discovery import SystemReader, parse_firmware_table_blob
from smbios_decoder.discovery.entry_point import EntryPointKind
from smbios_decoder.discovery.table_walker import StopReason
from smbios_decoder.errors import (
    AccessDeniedError,
    ChecksumMismatchError,
    NotFoundError,
    TruncatedInputError,
    UnsupportedPlatformError,
)


def sample_table():
    return (
        bytes([0x01, 0x05, 0x01, 0x00, 0x01]) + b"Acme\x00\x00"  # type 1, manufacturer string
        + bytes([0x02, 0x04, 0x02, 0x00]) + b"\x00\x00"          # type 2, no strings
        + bytes([0x7F, 0x04, 0x03, 0x00]) + b"\x00\x00"          # End-of-Table
    )


def entry_point_64(table_length):
    data = bytearray(24)
    data[0:5] = b"_SM3_"
    data[6] = 24
    data[7], data[8], data[9] = 3, 3, 0
    data[10] = 1
    struct.pack_into("<IQ", data, 12, table_length, 0x7E000000)
    data[5] = (-sum(data)) & 0xFF
    return bytes(data)


def entry_point_32(table_length, count):
    data = bytearray(31)
    data[0:4] = b"_SM_"
    data[5] = 31
    data[6], data[7] = 2, 7
    data[16:21] = b"_DMI_"
    struct.pack_into("<HIH", data, 22, table_length, 0x000F0000, count)
    data[30] = 0x27
    data[21] = (-sum(data[16:31])) & 0xFF
    data[4] = (-sum(data)) & 0xFF
    return bytes(data)


def write_sources(directory: Path, entry_point: bytes, table: bytes):
    ep_path = directory / "smbios_entry_point"
    table_path = directory / "DMI"
    ep_path.write_bytes(entry_point)
    table_path.write_bytes(table)
    return ep_path, table_path


def test_system_reader_64_bit(tmp_path):
    """Test reading sysfs-style files with a 64-bit entry point."""
    print("Testing system reader...")

    table = sample_table()
    ep_path, table_path = write_sources(tmp_path, entry_point_64(len(table)), table)

    result = SystemReader(ep_path, table_path, platform="linux").read()
    assert result.entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT
    assert result.entry_point.version_string == "SMBIOS 3.3.0"
    assert [s.type for s in result.structures] == [1, 2, 127]
    assert result.structures[0].get_string(1) == "Acme"
    assert result.stop_reason is StopReason.END_OF_TABLE
    print("  ✓ 64-bit sources decoded")


def test_system_reader_32_bit_count(tmp_path):
    """The 32-bit structure count limits the walk."""
    table = sample_table()
    ep_path, table_path = write_sources(tmp_path, entry_point_32(len(table), 2), table)

    result = SystemReader(ep_path, table_path, platform="linux").read()
    assert result.entry_point.kind is EntryPointKind.THIRTY_TWO_BIT
    assert [s.type for s in result.structures] == [1, 2]
    assert result.stop_reason is StopReason.COUNT_REACHED


def test_system_reader_read_raw(tmp_path):
    ep_path, table_path = write_sources(tmp_path, b"entry", b"table")
    assert SystemReader(ep_path, table_path, platform="linux").read_raw() == (b"entry", b"table")


def test_system_reader_bad_entry_point(tmp_path):
    """Entry point errors propagate unchanged."""
    data = bytearray(entry_point_64(10))
    data[12] ^= 0xFF
    ep_path, table_path = write_sources(tmp_path, bytes(data), sample_table())
    with pytest.raises(ChecksumMismatchError):
        SystemReader(ep_path, table_path, platform="linux").read()


def test_system_reader_missing_files(tmp_path):
    """Missing sources raise NotFoundError."""
    reader = SystemReader(tmp_path / "smbios_entry_point", tmp_path / "DMI", platform="linux")
    with pytest.raises(NotFoundError):
        reader.read()


def test_system_reader_permission_denied(tmp_path, monkeypatch):
    """Unreadable sources raise AccessDeniedError."""
    ep_path, table_path = write_sources(tmp_path, entry_point_64(4), b"\x7f\x04\x00\x00\x00\x00")

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)
    with pytest.raises(AccessDeniedError):
        SystemReader(ep_path, table_path, platform="linux").read()


def test_system_reader_unsupported_platform():
    """Default sysfs paths are only used on Linux."""
    with pytest.raises(UnsupportedPlatformError):
        SystemReader(platform="darwin").read()


def test_system_reader_explicit_paths_any_platform(tmp_path):
    table = sample_table()
    ep_path, table_path = write_sources(tmp_path, entry_point_64(len(table)), table)
    result = SystemReader(ep_path, table_path, platform="win32").read()
    assert len(result.structures) == 3


def test_firmware_table_blob_64_bit():
    """Test a Windows RSMB blob reporting SMBIOS 3.x."""
    print("\nTesting firmware table blob...")

    table = sample_table()
    blob = bytes([
        0x00,        # calling method
        0x03,        # major version
        0x04,        # minor version
        0x00,        # DMI revision
    ]) + struct.pack("<I", len(table)) + table

    result = parse_firmware_table_blob(blob)
    assert result.entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT
    assert result.entry_point.version_string == "SMBIOS 3.4.0"
    assert result.entry_point.max_table_size == len(table)
    assert [s.type for s in result.structures] == [1, 2, 127]
    print("  ✓ RSMB blob decoded")


def test_firmware_table_blob_32_bit_clamped():
    """An overstated length is clamped; SMBIOS 2.x yields a 32-bit entry point."""
    table = sample_table()
    blob = bytes([0x01, 0x02, 0x08, 0x00]) + struct.pack("<I", len(table) + 100) + table

    result = parse_firmware_table_blob(blob)
    assert result.entry_point.kind is EntryPointKind.THIRTY_TWO_BIT
    assert result.entry_point.version_string == "SMBIOS 2.8"
    assert result.entry_point.table_length == len(table)
    assert len(result.structures) == 3


def test_firmware_table_blob_truncated():
    with pytest.raises(TruncatedInputError):
        parse_firmware_table_blob(b"\x00\x03\x00")


def test_system_reader_directory_source(tmp_path):
    """A directory in place of a source file is reported as not found."""
    table_path = tmp_path / "DMI"
    table_path.write_bytes(sample_table())
    with pytest.raises(NotFoundError):
        SystemReader(tmp_path, table_path, platform="linux").read()


def test_system_reader_other_os_error(tmp_path, monkeypatch):
    """Other read failures surface as AccessDeniedError."""
    ep_path, table_path = write_sources(tmp_path, entry_point_64(4), b"\x7f\x04\x00\x00\x00\x00")

    def fail(self):
        raise OSError(5, "Input/output error", str(self))

    monkeypatch.setattr(Path, "read_bytes", fail)
    with pytest.raises(AccessDeniedError):
        SystemReader(ep_path, table_path, platform="linux").read()

#!/usr/bin/env python3
"""Test versioned, sentinel-aware field resolution."""

import struct

from smbios_decoder.discovery.table_walker import Structure, StructureHeader
from smbios_decoder.structures import decode_structure
from smbios_decoder.structures.fields import BYTES, STRING, Field, resolve_fields
from smbios_decoder.structures.layouts import GB, KB, MB, PHYSICAL_MEMORY_ARRAY


def make_structure(data, strings=()):
    data = bytes(data)
    return Structure(header=StructureHeader.from_bytes(data), data=data, strings=tuple(strings))


def memory_array(length, maximum_capacity, extended=None):
    """Type 16 Physical Memory Array of the given length."""
    data = bytearray(struct.pack(
        "<BBH"   # header
        "BBB"    # location, use, error correction
        "I"      # maximum capacity (KB)
        "H"      # error information handle
        "H",     # number of memory devices
        16, length, 0x1000,
        0x03, 0x03, 0x06,
        maximum_capacity,
        0xFFFE,
        4,
    ))
    if extended is not None:
        data += struct.pack("<Q", extended)
    assert len(data) == length
    return make_structure(data)


def test_field_absent_on_short_structure():
    """A field valid only from length 23 is absent at length 15."""
    print("Testing versioned field presence...")

    short = memory_array(15, 0x00100000)
    fields = resolve_fields(short, PHYSICAL_MEMORY_ARRAY)
    assert fields["extended_maximum_capacity"] is None, "Extended capacity should be absent"
    assert "extended_maximum_capacity" in fields.absent
    assert not fields.is_present("extended_maximum_capacity")
    assert fields["maximum_capacity"] == 0x00100000 * KB, "1 GB expressed in bytes"
    assert fields["number_of_memory_devices"] == 4
    print("  ✓ Length 15 reports the extended field absent")


def test_field_present_on_long_structure():
    """The same field reads verbatim from length 23."""
    long = memory_array(23, 0x00100000, extended=0x0000000040000000)
    fields = resolve_fields(long, PHYSICAL_MEMORY_ARRAY)
    assert fields.is_present("extended_maximum_capacity")
    assert fields["extended_maximum_capacity"] == 0x40000000, "Reported verbatim"
    assert fields.absent == frozenset()


def test_sentinel_uses_overflow_field():
    """A narrow field at its sentinel yields the wider field's value."""
    print("\nTesting sentinel overflow...")

    fields = decode_structure(memory_array(23, 0x80000000, extended=64 * GB))
    assert fields["maximum_capacity"] == 64 * GB, "Overflow value expected, not the sentinel"
    assert fields.sources["maximum_capacity"] == "extended_maximum_capacity"
    assert fields.raw["maximum_capacity"] == 0x80000000
    print("  ✓ Sentinel defers to the overflow field")


def test_sentinel_without_overflow_keeps_literal():
    """With the overflow field absent the sentinel is reported as-is."""
    fields = decode_structure(memory_array(15, 0x80000000))
    assert fields["maximum_capacity"] == 0x80000000 * KB
    assert fields.sources["maximum_capacity"] == "maximum_capacity"
    assert "maximum_capacity" not in fields.unknown


def test_unknown_only_sentinel():
    """Handle 0xFFFE means 'not provided' and resolves to None."""
    fields = decode_structure(memory_array(15, 0x00100000))
    assert fields["memory_error_information_handle"] is None
    assert "memory_error_information_handle" in fields.unknown
    assert "memory_error_information_handle" not in fields.absent


def test_memory_device_extended_size():
    """Type 17 size 0x7FFF defers to the 32-bit extended size (in MB)."""
    data = bytearray(0x22)
    struct.pack_into("<BBH", data, 0, 17, len(data), 0x1100)
    struct.pack_into("<H", data, 0x0C, 0x7FFF)      # size: see extended size
    struct.pack_into("<H", data, 0x15, 0xFFFF)      # speed: see extended speed
    struct.pack_into("<I", data, 0x1C, 0x80008000)  # extended size, bit 31 reserved
    fields = decode_structure(make_structure(data))

    assert fields["size"] == 32 * GB, f"Unexpected size {fields['size']}"
    assert fields.sources["size"] == "extended_size"
    # Extended speed lives at 0x54, far past this structure
    assert fields["speed"] == 0xFFFF
    assert "extended_speed" in fields.absent


def test_memory_device_size_units():
    """Bit 15 of the size selects KB granularity; 0xFFFF is unknown."""
    data = bytearray(0x15)
    struct.pack_into("<BBH", data, 0, 17, len(data), 0x1100)

    struct.pack_into("<H", data, 0x0C, 0x8400)
    assert decode_structure(make_structure(data))["size"] == 1 * MB

    struct.pack_into("<H", data, 0x0C, 16384)
    assert decode_structure(make_structure(data))["size"] == 16 * GB

    struct.pack_into("<H", data, 0x0C, 0xFFFF)
    fields = decode_structure(make_structure(data))
    assert fields["size"] is None
    assert "size" in fields.unknown

    struct.pack_into("<H", data, 0x0C, 0x0000)
    assert decode_structure(make_structure(data))["size"] == 0, "0 means no module installed"


def test_custom_field_descriptors():
    """Test descriptor options directly."""
    print("\nTesting field descriptors...")

    data = bytes([
        0x80, 0x0C, 0x00, 0x20,  # header: OEM type 128, length 12, handle 0x2000
        0x01,                    # string index 1
        0x00,                    # string index 0
        0xFF,                    # narrow count (sentinel)
        0xF5,                    # flags
        0x10, 0x00,              # wide count = 16
        0xDE, 0xAD,              # raw bytes
    ])
    s = make_structure(data, strings=["Name"])
    layout = (
        Field("name", 0x04, kind=STRING),
        Field("empty", 0x05, kind=STRING),
        Field("count", 0x06, sentinel=0xFF, overflow="count_2"),
        Field("low_flags", 0x07, mask=0x0F),
        Field("count_2", 0x08, 2),
        Field("blob", 0x0A, 2, kind=BYTES),
        Field("late", 0x04, min_length=0x20),
        Field("doubled", 0x08, 2, convert=lambda v: v * 2),
    )
    fields = resolve_fields(s, layout)

    assert fields["name"] == "Name"
    assert fields["empty"] == "", "String index 0 resolves to the empty string"
    assert fields["count"] == 16
    assert fields["low_flags"] == 0x05
    assert fields["blob"] == b"\xde\xad"
    assert fields["late"] is None and "late" in fields.absent, "min_length overrides offset+width"
    assert fields["doubled"] == 32
    assert fields.get("late", "n/a") == "n/a"
    assert "name" in fields
    assert fields.to_dict()["count_2"] == 16
    print("  ✓ Descriptors resolve as declared")


def test_overflow_unknown_propagates():
    """An overflow field that is itself unknown marks the narrow field unknown."""
    s = make_structure(bytes([0x80, 0x08, 0x00, 0x00, 0xFF, 0x00, 0x00, 0x00]))
    layout = (
        Field("count", 0x04, sentinel=0xFF, overflow="count_2"),
        Field("count_2", 0x05, 2, unknown=0),
    )
    fields = resolve_fields(s, layout)
    assert fields["count"] is None
    assert {"count", "count_2"} <= fields.unknown

"""Structure table walking and string table extraction.

Each structure is a 4-byte header (type, length, handle), ``length - 4``
bytes of type-specific fields, then a string table of NUL-terminated strings
closed by one extra NUL. An empty string table is exactly two NUL bytes.
"""

import logging
import struct
from enum import Enum
from collections import Counter
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace

from smbios_decoder.discovery.entry_point import EntryPoint, EntryPointKind

logger = logging.getLogger(__name__)

HEADER_SIZE = 4
END_OF_TABLE = 127

# Lossless: bytes that are not valid UTF-8 survive a decode/encode round trip
STRING_ENCODING = "utf-8"
STRING_ERRORS = "surrogateescape"


class StopReason(Enum):
    """Why a table walk ended."""

    END_OF_TABLE = "end-of-table"
    EXHAUSTED = "exhausted"
    COUNT_REACHED = "count-reached"
    TRUNCATED_HEADER = "truncated-header"
    MALFORMED_HEADER = "malformed-header"
    TRUNCATED_STRUCTURE = "truncated-structure"

    @property
    def is_clean(self) -> bool:
        return self in (StopReason.END_OF_TABLE, StopReason.EXHAUSTED, StopReason.COUNT_REACHED)


@dataclass(frozen=True)
class StructureHeader:
    """Common 4-byte structure header."""
    type: int
    length: int
    handle: int

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "StructureHeader":
        struct_type, length, handle = struct.unpack_from("<BBH", data, offset)
        return cls(type=struct_type, length=length, handle=handle)


@dataclass(frozen=True)
class Structure:
    """One decoded structure: header, formatted section and string table.

    ``data`` spans exactly the formatted section, header included, so field
    offsets match the ones in DSP0134.
    """
    header: StructureHeader
    data: bytes
    strings: Tuple[str, ...] = ()

    @property
    def type(self) -> int:
        return self.header.type

    @property
    def handle(self) -> int:
        return self.header.handle

    @property
    def type_name(self) -> str:
        from smbios_decoder.structures import type_name
        return type_name(self.header.type)

    def get_string(self, index: int) -> str:
        """Return string ``index`` (1-based); 0 or out of range gives ''."""
        if index <= 0 or index > len(self.strings):
            return ""
        return self.strings[index - 1]

    def _unpack(self, fmt: str, offset: int, width: int) -> int:
        if offset < 0 or offset + width > len(self.data):
            return 0
        return struct.unpack_from(fmt, self.data, offset)[0]

    def get_byte(self, offset: int) -> int:
        return self._unpack("<B", offset, 1)

    def get_word(self, offset: int) -> int:
        return self._unpack("<H", offset, 2)

    def get_dword(self, offset: int) -> int:
        return self._unpack("<I", offset, 4)

    def get_qword(self, offset: int) -> int:
        return self._unpack("<Q", offset, 8)


@dataclass
class TableWalk:
    """Walker output: structures plus how the walk ended."""
    structures: List[Structure]
    stop_reason: StopReason
    bytes_consumed: int


@dataclass
class DecodeResult:
    """Entry point plus the ordered structures it located."""
    entry_point: EntryPoint
    structures: List[Structure] = field(default_factory=list)
    stop_reason: StopReason = StopReason.EXHAUSTED

    def get_structures(self, struct_type: int) -> List[Structure]:
        """All structures of one type, in table order."""
        return [s for s in self.structures if s.header.type == struct_type]

    def get_structure(self, struct_type: int) -> Optional[Structure]:
        """First structure of one type, or None."""
        for s in self.structures:
            if s.header.type == struct_type:
                return s
        return None

    def find_handle(self, handle: int) -> Optional[Structure]:
        for s in self.structures:
            if s.header.handle == handle:
                return s
        return None

    def type_counts(self) -> Dict[int, int]:
        return dict(Counter(s.header.type for s in self.structures))


def parse_string_table(data: bytes, start: int) -> Tuple[List[str], int]:
    """Extract the string table beginning at ``start``.

    Args:
        data: Complete table buffer.
        start: Offset immediately after a structure's formatted section.

    Returns:
        (strings, next_offset) where next_offset is where the following
        structure begins.
    """
    strings: List[str] = []
    current = start
    end_of_data = len(data)

    while current < end_of_data:
        if data[current] == 0:
            if not strings:
                # Empty table: both NULs belong to it
                return strings, min(current + 2, end_of_data)
            # Extra NUL after the last string's own terminator
            return strings, current + 1

        end = data.find(b"\x00", current)
        if end == -1:
            end = end_of_data

        if end > current:
            strings.append(data[current:end].decode(STRING_ENCODING, STRING_ERRORS))

        current = end + 1

    return strings, min(current, end_of_data)


def walk_table(table: bytes, max_structures: int = 0) -> TableWalk:
    """Split a raw structure table into structures.

    Never raises on malformed or truncated data: the walk stops and returns
    everything decoded so far, with the reason recorded.

    Args:
        table: Raw structure table bytes.
        max_structures: Structure-count hint (32-bit entry point); 0 = no limit.
    """
    table = bytes(table)
    structures: List[Structure] = []
    offset = 0
    reason = StopReason.EXHAUSTED

    while offset < len(table):
        if offset + HEADER_SIZE > len(table):
            reason = StopReason.TRUNCATED_HEADER
            break

        header = StructureHeader.from_bytes(table, offset)

        if header.type == END_OF_TABLE:
            structures.append(
                Structure(header=header, data=bytes(table[offset:offset + header.length]))
            )
            offset = min(offset + header.length, len(table))
            reason = StopReason.END_OF_TABLE
            break

        if header.length < HEADER_SIZE:
            reason = StopReason.MALFORMED_HEADER
            break

        if offset + header.length > len(table):
            reason = StopReason.TRUNCATED_STRUCTURE
            break

        formatted = bytes(table[offset:offset + header.length])
        strings, next_offset = parse_string_table(table, offset + header.length)

        structures.append(Structure(header=header, data=formatted, strings=tuple(strings)))
        logger.debug(
            f"Structure type {header.type} handle 0x{header.handle:04x} "
            f"length {header.length} strings {len(strings)} at offset {offset}"
        )
        offset = next_offset

        if max_structures > 0 and len(structures) >= max_structures:
            reason = StopReason.COUNT_REACHED
            break

    if not reason.is_clean:
        logger.warning(
            f"Structure table walk stopped early ({reason.value}) at offset {offset} "
            f"after {len(structures)} structure(s)"
        )

    return TableWalk(structures=structures, stop_reason=reason, bytes_consumed=min(offset, len(table)))


def walk_structures(table: bytes, max_structures: int = 0) -> List[Structure]:
    """Ordered structures of a raw table (see ``walk_table``)."""
    return walk_table(table, max_structures).structures


def decode_table(entry_point: EntryPoint, table: bytes) -> DecodeResult:
    """Walk ``table`` using the limits announced by ``entry_point``."""
    walk = walk_table(table, entry_point.walk_limit)

    if entry_point.kind is EntryPointKind.THIRTY_TWO_BIT and not entry_point.table_length:
        entry_point = replace(entry_point, table_length=len(table))

    return DecodeResult(
        entry_point=entry_point,
        structures=walk.structures,
        stop_reason=walk.stop_reason,
    )

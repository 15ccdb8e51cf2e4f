"""SMBIOS entry point decoding per DSP0134 section 5.2.

Two wire variants exist: the SMBIOS 2.1 32-bit entry point (anchor ``_SM_``
with an intermediate ``_DMI_`` anchor) and the SMBIOS 3.0 64-bit entry point
(anchor ``_SM3_``). Both carry whole-structure checksums that must sum to
zero modulo 256.
"""

import logging
import struct
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from smbios_decoder.errors import (
    ChecksumMismatchError,
    NotFoundError,
    TruncatedInputError,
)

logger = logging.getLogger(__name__)

ANCHOR_64 = b"_SM3_"
ANCHOR_32 = b"_SM_"
INTERMEDIATE_ANCHOR = b"_DMI_"

# Fixed layout sizes (DSP0134 Tables 1 and 2)
ENTRY_POINT_64_SIZE = 24
ENTRY_POINT_32_SIZE = 31

# Intermediate (_DMI_) checksum span within the 32-bit entry point
INTERMEDIATE_START = 16
INTERMEDIATE_END = 31


class EntryPointKind(Enum):
    """Entry point wire variant."""

    THIRTY_TWO_BIT = 0
    SIXTY_FOUR_BIT = 1


@dataclass(frozen=True)
class EntryPoint:
    """Decoded table-location descriptor."""

    kind: EntryPointKind
    major_version: int
    minor_version: int
    table_address: int
    revision: Optional[int] = None        # 64-bit only
    table_length: Optional[int] = None    # 32-bit only
    max_table_size: Optional[int] = None  # 64-bit only
    structure_count: Optional[int] = None  # 32-bit only
    bcd_revision: Optional[int] = None    # 32-bit only
    entry_point_revision: int = 0
    entry_point_length: int = 0

    @property
    def version_string(self) -> str:
        """Human-readable SMBIOS version, e.g. ``SMBIOS 3.4.0``."""
        if self.kind is EntryPointKind.SIXTY_FOUR_BIT:
            return f"SMBIOS {self.major_version}.{self.minor_version}.{self.revision or 0}"
        return f"SMBIOS {self.major_version}.{self.minor_version}"

    @property
    def walk_limit(self) -> int:
        """Structure-count hint for the walker (0 means no limit)."""
        if self.kind is EntryPointKind.THIRTY_TWO_BIT:
            return self.structure_count or 0
        return 0

    def __str__(self) -> str:
        return self.version_string


def checksum(data: bytes) -> int:
    """Sum of all bytes modulo 256 (zero for a valid span)."""
    return sum(data) & 0xFF


def _declared_length(data: bytes, offset: int) -> int:
    # Shorter declared lengths are accepted (SMBIOS 2.1 firmware reports 0x1E)
    length = data[offset]
    if length > len(data):
        raise TruncatedInputError(
            f"Declared entry point length {length} exceeds the {len(data)} bytes supplied"
        )
    return length


def decode_entry_point_64(data: bytes) -> EntryPoint:
    """Decode a 64-bit (``_SM3_``) entry point.

    Layout:
      [0:5]   Anchor "_SM3_"
      [5]     Checksum
      [6]     Entry point length
      [7]     Major version
      [8]     Minor version
      [9]     Docrev
      [10]    Entry point revision
      [11]    Reserved
      [12:16] Structure table maximum size (little-endian)
      [16:24] Structure table address (little-endian)

    Raises:
        TruncatedInputError: Fewer than 24 bytes, or a declared length past the buffer.
        NotFoundError: Anchor mismatch.
        ChecksumMismatchError: Bytes over the declared length do not sum to 0.
    """
    if len(data) < ENTRY_POINT_64_SIZE:
        raise TruncatedInputError(
            f"64-bit entry point needs {ENTRY_POINT_64_SIZE} bytes, got {len(data)}"
        )
    if bytes(data[0:5]) != ANCHOR_64:
        raise NotFoundError("64-bit entry point anchor _SM3_ not found")

    length = _declared_length(data, 6)
    if checksum(data[:length]) != 0:
        raise ChecksumMismatchError("64-bit entry point checksum mismatch")

    max_size, address = struct.unpack_from("<IQ", data, 12)

    return EntryPoint(
        kind=EntryPointKind.SIXTY_FOUR_BIT,
        major_version=data[7],
        minor_version=data[8],
        revision=data[9],
        entry_point_revision=data[10],
        max_table_size=max_size,
        table_address=address,
        entry_point_length=length,
    )


def decode_entry_point_32(data: bytes) -> EntryPoint:
    """Decode a 32-bit (``_SM_``) entry point.

    Layout:
      [0:4]   Anchor "_SM_"
      [4]     Checksum
      [5]     Entry point length
      [6]     Major version
      [7]     Minor version
      [8:10]  Maximum structure size
      [10]    Entry point revision
      [11:16] Formatted area
      [16:21] Intermediate anchor "_DMI_"
      [21]    Intermediate checksum
      [22:24] Structure table length
      [24:28] Structure table address
      [28:30] Number of structures
      [30]    BCD revision

    Raises:
        TruncatedInputError: Fewer than 31 bytes, or a declared length past the buffer.
        NotFoundError: Either anchor mismatches.
        ChecksumMismatchError: Either checksum does not sum to 0.
    """
    if len(data) < ENTRY_POINT_32_SIZE:
        raise TruncatedInputError(
            f"32-bit entry point needs {ENTRY_POINT_32_SIZE} bytes, got {len(data)}"
        )
    if bytes(data[0:4]) != ANCHOR_32:
        raise NotFoundError("32-bit entry point anchor _SM_ not found")

    length = _declared_length(data, 5)
    if checksum(data[:length]) != 0:
        raise ChecksumMismatchError("32-bit entry point checksum mismatch")

    if bytes(data[INTERMEDIATE_START:INTERMEDIATE_START + 5]) != INTERMEDIATE_ANCHOR:
        raise NotFoundError("Intermediate anchor _DMI_ not found")
    if checksum(data[INTERMEDIATE_START:INTERMEDIATE_END]) != 0:
        raise ChecksumMismatchError("Intermediate (_DMI_) checksum mismatch")

    table_length, address, count = struct.unpack_from("<HIH", data, 22)

    return EntryPoint(
        kind=EntryPointKind.THIRTY_TWO_BIT,
        major_version=data[6],
        minor_version=data[7],
        entry_point_revision=data[10],
        table_length=table_length,
        table_address=address,
        structure_count=count,
        bcd_revision=data[30],
        entry_point_length=length,
    )


def decode_entry_point(data: bytes) -> EntryPoint:
    """Decode whichever entry point variant the buffer holds.

    The 64-bit form is tried first; the 32-bit form only when the ``_SM3_``
    anchor is absent.
    """
    if bytes(data[0:5]) == ANCHOR_64:
        entry_point = decode_entry_point_64(data)
    elif bytes(data[0:4]) == ANCHOR_32:
        entry_point = decode_entry_point_32(data)
    else:
        raise NotFoundError("No SMBIOS entry point anchor found")

    logger.debug(f"Decoded {entry_point.kind.name} entry point: {entry_point.version_string}")
    return entry_point

"""Locating SMBIOS data on the running system and decoding it."""

import sys
import struct
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from smbios_decoder.errors import (
    AccessDeniedError,
    NotFoundError,
    TruncatedInputError,
    UnsupportedPlatformError,
)
from smbios_decoder.discovery.entry_point import (
    EntryPoint,
    EntryPointKind,
    decode_entry_point,
    decode_entry_point_32,
    decode_entry_point_64,
)
from smbios_decoder.discovery.table_walker import (
    DecodeResult,
    StopReason,
    Structure,
    StructureHeader,
    TableWalk,
    decode_table,
    parse_string_table,
    walk_structures,
    walk_table,
)

__all__ = [
    "SystemReader",
    "parse_firmware_table_blob",
    "EntryPoint",
    "EntryPointKind",
    "decode_entry_point",
    "decode_entry_point_32",
    "decode_entry_point_64",
    "DecodeResult",
    "StopReason",
    "Structure",
    "StructureHeader",
    "TableWalk",
    "decode_table",
    "parse_string_table",
    "walk_structures",
    "walk_table",
]

logger = logging.getLogger(__name__)

SYSFS_ENTRY_POINT = "/sys/firmware/dmi/tables/smbios_entry_point"
SYSFS_TABLE = "/sys/firmware/dmi/tables/DMI"

# Raw SMBIOS data header returned by GetSystemFirmwareTable('RSMB')
FIRMWARE_BLOB_HEADER_SIZE = 8


def parse_firmware_table_blob(blob: bytes) -> DecodeResult:
    """Decode a Windows ``RSMB`` firmware table blob.

    Layout:
      [0]    Used20CallingMethod
      [1]    SMBIOS major version
      [2]    SMBIOS minor version
      [3]    DMI revision
      [4:8]  Table length (little-endian)
      [8:]   Structure table

    There is no entry point in the blob; one is synthesized from the header.
    A length larger than the data that follows is clamped.
    """
    if len(blob) < FIRMWARE_BLOB_HEADER_SIZE:
        raise TruncatedInputError(
            f"Firmware table blob needs {FIRMWARE_BLOB_HEADER_SIZE} bytes, got {len(blob)}"
        )

    _, major, minor, dmi_revision, length = struct.unpack_from("<BBBBI", blob, 0)
    available = len(blob) - FIRMWARE_BLOB_HEADER_SIZE
    if length > available:
        logger.warning(f"Firmware table length {length} clamped to {available} available bytes")
        length = available

    table = bytes(blob[FIRMWARE_BLOB_HEADER_SIZE:FIRMWARE_BLOB_HEADER_SIZE + length])

    if major >= 3:
        entry_point = EntryPoint(
            kind=EntryPointKind.SIXTY_FOUR_BIT,
            major_version=major,
            minor_version=minor,
            revision=dmi_revision,
            max_table_size=length,
            table_address=0,
        )
    else:
        entry_point = EntryPoint(
            kind=EntryPointKind.THIRTY_TWO_BIT,
            major_version=major,
            minor_version=minor,
            table_length=length,
            table_address=0,
            bcd_revision=dmi_revision,
        )

    return decode_table(entry_point, table)


class SystemReader:
    """Read the SMBIOS entry point and structure table exposed by the OS."""

    def __init__(
        self,
        entry_point_path: Union[str, Path] = SYSFS_ENTRY_POINT,
        table_path: Union[str, Path] = SYSFS_TABLE,
        platform: Optional[str] = None,
    ):
        """
        Args:
            entry_point_path: File holding the raw entry point.
            table_path: File holding the raw structure table.
            platform: Platform name to assume (defaults to ``sys.platform``).
        """
        self.entry_point_path = Path(entry_point_path)
        self.table_path = Path(table_path)
        self.platform = platform or sys.platform

    def _uses_default_paths(self) -> bool:
        return (
            str(self.entry_point_path) == SYSFS_ENTRY_POINT
            and str(self.table_path) == SYSFS_TABLE
        )

    def read_raw(self) -> Tuple[bytes, bytes]:
        """
        Read the raw entry point and table bytes.

        Returns:
            (entry_point_bytes, table_bytes)

        Raises:
            UnsupportedPlatformError: Not Linux and no explicit paths given.
            NotFoundError: A source file does not exist.
            AccessDeniedError: A source file could not be opened.
        """
        if not self.platform.startswith("linux") and self._uses_default_paths():
            raise UnsupportedPlatformError(
                f"Reading SMBIOS data is not supported on {self.platform}; "
                "use a dump file instead"
            )

        entry_point = self._read_file(self.entry_point_path)
        table = self._read_file(self.table_path)
        logger.info(f"Read entry point from {self.entry_point_path} and table from {self.table_path}")
        return entry_point, table

    def read(self) -> DecodeResult:
        """Read and decode the system's SMBIOS data."""
        raw_entry_point, table = self.read_raw()
        entry_point = decode_entry_point(raw_entry_point)
        result = decode_table(entry_point, table)
        logger.info(
            f"{entry_point.version_string}: {len(result.structures)} structure(s), "
            f"walk ended with {result.stop_reason.value}"
        )
        return result

    def _read_file(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise NotFoundError(f"SMBIOS source {path} not found")
        except PermissionError:
            raise AccessDeniedError(f"Permission denied reading {path} (try running as root)")
        except OSError as e:
            raise AccessDeniedError(f"Cannot read {path}: {e}")

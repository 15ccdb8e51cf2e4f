"""SMBIOS (DSP0134) table decoding."""

from smbios_decoder.errors import (
    AccessDeniedError,
    ArchiveFormatError,
    ChecksumMismatchError,
    MalformedStructureError,
    NotFoundError,
    SMBIOSError,
    TruncatedInputError,
    UnsupportedPlatformError,
)
from smbios_decoder.discovery import (
    DecodeResult,
    EntryPoint,
    EntryPointKind,
    StopReason,
    Structure,
    SystemReader,
    decode_entry_point,
    decode_table,
    parse_firmware_table_blob,
    walk_structures,
    walk_table,
)
from smbios_decoder.structures import StructureParser, decode_structure, type_name
from smbios_decoder.archive import read_archive, write_archive

__version__ = "0.1.0"

__all__ = [
    "AccessDeniedError",
    "ArchiveFormatError",
    "ChecksumMismatchError",
    "DecodeResult",
    "EntryPoint",
    "EntryPointKind",
    "MalformedStructureError",
    "NotFoundError",
    "SMBIOSError",
    "StopReason",
    "Structure",
    "StructureParser",
    "SystemReader",
    "TruncatedInputError",
    "UnsupportedPlatformError",
    "decode_entry_point",
    "decode_structure",
    "decode_table",
    "parse_firmware_table_blob",
    "read",
    "read_archive",
    "read_file",
    "type_name",
    "walk_structures",
    "walk_table",
    "write_archive",
]


def read() -> DecodeResult:
    """Decode the running system's SMBIOS data."""
    return SystemReader().read()


def read_file(path) -> DecodeResult:
    """Decode a dump file written by ``write_archive``."""
    return read_archive(path)

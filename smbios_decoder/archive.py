"""Dump file container for archiving a decoded table.

A fixed 28-byte header followed by the raw structure table, rebuilt from the
decoded structures exactly as it appears in firmware memory:

  [0:9]    Magic "SMBIOSRAW"
  [9]      Format version (1)
  [10]     Entry point kind (0 = 32-bit, 1 = 64-bit)
  [11]     SMBIOS major version
  [12]     SMBIOS minor version
  [13]     SMBIOS revision (64-bit only, else 0)
  [14]     Reserved
  [15:19]  Table length (little-endian)
  [19:27]  Original table address (little-endian)
  [27]     Padding
"""

import logging
import struct
from pathlib import Path
from typing import Iterable, Union

from smbios_decoder.errors import AccessDeniedError, ArchiveFormatError, NotFoundError
from smbios_decoder.discovery.entry_point import EntryPoint, EntryPointKind
from smbios_decoder.discovery.table_walker import (
    DecodeResult,
    Structure,
    STRING_ENCODING,
    STRING_ERRORS,
    walk_table,
)

logger = logging.getLogger(__name__)

ARCHIVE_MAGIC = b"SMBIOSRAW"
ARCHIVE_VERSION = 1
ARCHIVE_EXTENSION = ".smbios"

_HEADER = struct.Struct("<9sBBBBBBIQx")
ARCHIVE_HEADER_SIZE = _HEADER.size  # 28


def serialize_structures(structures: Iterable[Structure]) -> bytes:
    """Rebuild the raw structure table from decoded structures."""
    table = bytearray()
    for s in structures:
        table += s.data
        if not s.strings:
            table += b"\x00\x00"
            continue
        for text in s.strings:
            table += text.encode(STRING_ENCODING, STRING_ERRORS) + b"\x00"
        table += b"\x00"
    return bytes(table)


def pack_archive(result: DecodeResult) -> bytes:
    """Header plus rebuilt table, as written by ``write_archive``."""
    entry_point = result.entry_point
    table = serialize_structures(result.structures)
    is_64 = entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT
    header = _HEADER.pack(
        ARCHIVE_MAGIC,
        ARCHIVE_VERSION,
        1 if is_64 else 0,
        entry_point.major_version,
        entry_point.minor_version,
        (entry_point.revision or 0) if is_64 else 0,
        0,
        len(table),
        entry_point.table_address,
    )
    return header + table


def unpack_archive(data: bytes) -> DecodeResult:
    """Decode archive bytes back into an entry point and structures.

    Raises:
        ArchiveFormatError: Short header, bad magic, unknown version, or a
            table shorter than the header announces.
    """
    if len(data) < ARCHIVE_HEADER_SIZE:
        raise ArchiveFormatError(
            f"Dump file header needs {ARCHIVE_HEADER_SIZE} bytes, got {len(data)}"
        )

    magic, version, kind, major, minor, revision, _, length, address = _HEADER.unpack_from(data, 0)
    if magic != ARCHIVE_MAGIC:
        raise ArchiveFormatError("Not an SMBIOS dump file (bad magic)")
    if version != ARCHIVE_VERSION:
        raise ArchiveFormatError(f"Unsupported dump file version {version}")
    if len(data) < ARCHIVE_HEADER_SIZE + length:
        raise ArchiveFormatError(
            f"Dump file announces {length} table bytes but only "
            f"{len(data) - ARCHIVE_HEADER_SIZE} follow the header"
        )

    table = bytes(data[ARCHIVE_HEADER_SIZE:ARCHIVE_HEADER_SIZE + length])

    if kind == 1:
        entry_point = EntryPoint(
            kind=EntryPointKind.SIXTY_FOUR_BIT,
            major_version=major,
            minor_version=minor,
            revision=revision,
            table_address=address,
            max_table_size=length,
        )
    else:
        entry_point = EntryPoint(
            kind=EntryPointKind.THIRTY_TWO_BIT,
            major_version=major,
            minor_version=minor,
            table_address=address,
            table_length=length,
        )

    walk = walk_table(table)
    return DecodeResult(
        entry_point=entry_point,
        structures=walk.structures,
        stop_reason=walk.stop_reason,
    )


def write_archive(result: DecodeResult, path: Union[str, Path]) -> Path:
    """Write ``result`` to a dump file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = pack_archive(result)
    path.write_bytes(data)
    logger.info(f"Wrote {len(result.structures)} structure(s) to {path} ({len(data)} bytes)")
    return path


def read_archive(path: Union[str, Path]) -> DecodeResult:
    """Read a dump file written by ``write_archive``."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except (FileNotFoundError, IsADirectoryError):
        raise NotFoundError(f"Dump file {path} not found")
    except OSError as e:
        raise AccessDeniedError(f"Cannot read dump file {path}: {e}")
    result = unpack_archive(data)
    logger.info(f"Read {len(result.structures)} structure(s) from {path}")
    return result

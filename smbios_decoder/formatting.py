"""Human-readable renderings of decoded values."""

import uuid
from typing import Optional

from smbios_decoder.discovery.table_walker import STRING_ENCODING


def format_size(size: Optional[int]) -> str:
    """Render a byte count with the largest whole binary unit."""
    if size is None:
        return "Unknown"
    if size == 0:
        return "Not Installed"
    for unit, scale in (("TB", 1 << 40), ("GB", 1 << 30), ("MB", 1 << 20), ("KB", 1 << 10)):
        if size >= scale and size % scale == 0:
            return f"{size // scale} {unit}"
    if size >= 1 << 10:
        return f"{size // (1 << 10)} KB"
    return f"{size} bytes"


def format_uuid(raw: Optional[bytes]) -> str:
    """Render a system UUID.

    The first three fields are stored little-endian (SMBIOS 2.6+), so they
    are byte-swapped. All-zero means "not present", all-0xFF "not settable".
    """
    if not raw or len(raw) != 16:
        return "Unknown"
    if raw == b"\x00" * 16:
        return "Not Present"
    if raw == b"\xff" * 16:
        return "Not Settable"
    return str(uuid.UUID(bytes_le=bytes(raw))).upper()


def format_handle(handle: Optional[int]) -> str:
    if handle is None:
        return "Not Provided"
    return f"0x{handle:04X}"


def format_speed(speed: Optional[int]) -> str:
    if speed is None:
        return "Unknown"
    return f"{speed} MT/s"


def format_voltage(millivolts: Optional[int]) -> str:
    if millivolts is None:
        return "Unknown"
    return f"{millivolts / 1000:.3f} V"


def format_release(major: Optional[int], minor: Optional[int]) -> str:
    """``major.minor`` or "Not Available" when either part is unknown."""
    if major is None or minor is None:
        return "Not Available"
    return f"{major}.{minor}"


def printable(text: str) -> str:
    """Make a decoded string safe to print (undecodable bytes shown as escapes)."""
    return text.encode(STRING_ENCODING, "surrogateescape").decode(STRING_ENCODING, "backslashreplace")

"""Exception types raised while locating and decoding SMBIOS data."""


class SMBIOSError(ValueError):
    """Base class for all decoder errors."""


class NotFoundError(SMBIOSError):
    """No recognizable entry point anchor (or no SMBIOS source at all)."""


class ChecksumMismatchError(SMBIOSError):
    """An anchor was found but its checksum does not sum to zero."""


class TruncatedInputError(SMBIOSError):
    """Buffer is shorter than a fixed-size layout that must be read first."""


class MalformedStructureError(SMBIOSError):
    """Structure cannot be decoded (wrong type or invalid header)."""


class ArchiveFormatError(SMBIOSError):
    """Dump file has a bad magic, an unknown version or missing data."""


class UnsupportedPlatformError(SMBIOSError):
    """No acquisition method exists for the running operating system."""


class AccessDeniedError(SMBIOSError):
    """The firmware table exists but could not be read (try running as root)."""

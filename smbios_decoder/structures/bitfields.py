"""Small int wrappers for packed status and characteristic bytes."""

from typing import Dict, List


class BitField(int):
    """Raw integer with named single-bit flags."""

    FLAGS: Dict[int, str] = {}

    def has(self, bit: int) -> bool:
        return bool(self & (1 << bit))

    def names(self) -> List[str]:
        """Names of the set flags, in bit order."""
        return [name for bit, name in sorted(self.FLAGS.items()) if self.has(bit)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{int(self):X})"


class BIOSCharacteristics(BitField):
    FLAGS = {
        3: "BIOS characteristics not supported",
        4: "ISA",
        5: "MCA",
        6: "EISA",
        7: "PCI",
        8: "PC Card (PCMCIA)",
        9: "Plug and Play",
        10: "APM",
        11: "BIOS is upgradeable",
        12: "BIOS shadowing is allowed",
        13: "VL-VESA",
        14: "ESCD",
        15: "Boot from CD",
        16: "Selectable boot",
        17: "BIOS ROM is socketed",
        18: "Boot from PC Card (PCMCIA)",
        19: "EDD",
        26: "Print screen service",
        27: "8042 keyboard services",
        28: "Serial services",
        29: "Printer services",
        30: "CGA/mono video services",
        31: "NEC PC-98",
    }


class BIOSCharacteristicsExt1(BitField):
    FLAGS = {
        0: "ACPI",
        1: "USB legacy",
        2: "AGP",
        3: "I2O boot",
        4: "LS-120 boot",
        5: "ATAPI Zip drive boot",
        6: "IEEE 1394 boot",
        7: "Smart battery",
    }


class BIOSCharacteristicsExt2(BitField):
    FLAGS = {
        0: "BIOS boot specification",
        1: "Function key-initiated network boot",
        2: "Targeted content distribution",
        3: "UEFI",
        4: "Virtual machine",
        5: "Manufacturing mode supported",
        6: "Manufacturing mode enabled",
    }

    @property
    def is_uefi(self) -> bool:
        return self.has(3)

    @property
    def is_virtual_machine(self) -> bool:
        return self.has(4)


class BaseboardFeatures(BitField):
    FLAGS = {
        0: "Hosting board",
        1: "Requires daughter board",
        2: "Removable",
        3: "Replaceable",
        4: "Hot swappable",
    }


class ChassisTypeByte(BitField):
    """Chassis type (bits 0-6) plus the lock-present bit 7."""

    FLAGS = {7: "Chassis lock present"}

    @property
    def chassis_type(self) -> int:
        return int(self) & 0x7F

    @property
    def lock_present(self) -> bool:
        return self.has(7)


class ProcessorStatus(BitField):
    """Socket populated (bit 6) plus CPU status (bits 0-2)."""

    FLAGS = {6: "Socket populated"}

    CPU_STATUS = {
        0: "Unknown",
        1: "Enabled",
        2: "Disabled by user",
        3: "Disabled by BIOS (POST error)",
        4: "Idle",
        7: "Other",
    }

    @property
    def socket_populated(self) -> bool:
        return self.has(6)

    @property
    def cpu_status(self) -> str:
        return self.CPU_STATUS.get(int(self) & 0x07, "Reserved")


class ProcessorVoltage(BitField):
    """Legacy voltage bits, or a current voltage in tenths when bit 7 is set."""

    FLAGS = {0: "5.0 V", 1: "3.3 V", 2: "2.9 V"}

    @property
    def is_legacy(self) -> bool:
        return not self.has(7)

    @property
    def volts(self) -> float:
        if self.is_legacy:
            return 0.0
        return (int(self) & 0x7F) / 10.0


class ProcessorCharacteristics(BitField):
    FLAGS = {
        1: "Unknown",
        2: "64-bit capable",
        3: "Multi-core",
        4: "Hardware thread",
        5: "Execute protection",
        6: "Enhanced virtualization",
        7: "Power/performance control",
        8: "128-bit capable",
        9: "Arm64 SoC ID",
    }


class CacheConfiguration(BitField):
    """Cache level, socketed, location, enabled and operational mode."""

    FLAGS = {3: "Socketed", 7: "Enabled"}

    LOCATIONS = {0: "Internal", 1: "External", 2: "Reserved", 3: "Unknown"}
    MODES = {0: "Write Through", 1: "Write Back", 2: "Varies with Memory Address", 3: "Unknown"}

    @property
    def level(self) -> int:
        return (int(self) & 0x07) + 1

    @property
    def socketed(self) -> bool:
        return self.has(3)

    @property
    def location(self) -> str:
        return self.LOCATIONS[(int(self) >> 5) & 0x03]

    @property
    def enabled(self) -> bool:
        return self.has(7)

    @property
    def operational_mode(self) -> str:
        return self.MODES[(int(self) >> 8) & 0x03]


class MemoryTypeDetail(BitField):
    FLAGS = {
        1: "Other",
        2: "Unknown",
        3: "Fast-paged",
        4: "Static column",
        5: "Pseudo-static",
        6: "RAMBUS",
        7: "Synchronous",
        8: "CMOS",
        9: "EDO",
        10: "Window DRAM",
        11: "Cache DRAM",
        12: "Non-volatile",
        13: "Registered (Buffered)",
        14: "Unbuffered (Unregistered)",
        15: "LRDIMM",
    }


class MemoryDeviceAttributes(BitField):
    """Rank count in bits 0-3 (0 means unknown)."""

    @property
    def rank(self) -> int:
        return int(self) & 0x0F

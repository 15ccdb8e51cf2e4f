"""Name tables for structure types and enumerated field values (DSP0134)."""

from typing import Dict, Optional

# Structure types per DSP0134 Table 3
STRUCTURE_TYPES = {
    0: "BIOS Information",
    1: "System Information",
    2: "Baseboard Information",
    3: "System Enclosure",
    4: "Processor Information",
    5: "Memory Controller Information",
    6: "Memory Module Information",
    7: "Cache Information",
    8: "Port Connector Information",
    9: "System Slots",
    10: "On Board Devices Information",
    11: "OEM Strings",
    12: "System Configuration Options",
    13: "BIOS Language Information",
    14: "Group Associations",
    15: "System Event Log",
    16: "Physical Memory Array",
    17: "Memory Device",
    18: "32-bit Memory Error Information",
    19: "Memory Array Mapped Address",
    20: "Memory Device Mapped Address",
    21: "Built-in Pointing Device",
    22: "Portable Battery",
    23: "System Reset",
    24: "Hardware Security",
    25: "System Power Controls",
    26: "Voltage Probe",
    27: "Cooling Device",
    28: "Temperature Probe",
    29: "Electrical Current Probe",
    30: "Out-of-Band Remote Access",
    31: "Boot Integrity Services Entry Point",
    32: "System Boot Information",
    33: "64-bit Memory Error Information",
    34: "Management Device",
    35: "Management Device Component",
    36: "Management Device Threshold Data",
    37: "Memory Channel",
    38: "IPMI Device Information",
    39: "System Power Supply",
    40: "Additional Information",
    41: "Onboard Devices Extended Information",
    42: "Management Controller Host Interface",
    43: "TPM Device",
    44: "Processor Additional Information",
    45: "Firmware Inventory Information",
    46: "String Property",
    126: "Inactive",
    127: "End-of-Table",
}

WAKE_UP_TYPES = {
    0x00: "Reserved",
    0x01: "Other",
    0x02: "Unknown",
    0x03: "APM Timer",
    0x04: "Modem Ring",
    0x05: "LAN Remote",
    0x06: "Power Switch",
    0x07: "PCI PME#",
    0x08: "AC Power Restored",
}

BOARD_TYPES = {
    0x01: "Unknown",
    0x02: "Other",
    0x03: "Server Blade",
    0x04: "Connectivity Switch",
    0x05: "System Management Module",
    0x06: "Processor Module",
    0x07: "I/O Module",
    0x08: "Memory Module",
    0x09: "Daughter Board",
    0x0A: "Motherboard",
    0x0B: "Processor/Memory Module",
    0x0C: "Processor/IO Module",
    0x0D: "Interconnect Board",
}

CHASSIS_TYPES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Desktop",
    0x04: "Low Profile Desktop",
    0x05: "Pizza Box",
    0x06: "Mini Tower",
    0x07: "Tower",
    0x08: "Portable",
    0x09: "Laptop",
    0x0A: "Notebook",
    0x0B: "Hand Held",
    0x0C: "Docking Station",
    0x0D: "All in One",
    0x0E: "Sub Notebook",
    0x0F: "Space-saving",
    0x10: "Lunch Box",
    0x11: "Main Server Chassis",
    0x12: "Expansion Chassis",
    0x13: "SubChassis",
    0x14: "Bus Expansion Chassis",
    0x15: "Peripheral Chassis",
    0x16: "RAID Chassis",
    0x17: "Rack Mount Chassis",
    0x18: "Sealed-case PC",
    0x19: "Multi-system Chassis",
    0x1A: "Compact PCI",
    0x1B: "Advanced TCA",
    0x1C: "Blade",
    0x1D: "Blade Enclosure",
    0x1E: "Tablet",
    0x1F: "Convertible",
    0x20: "Detachable",
    0x21: "IoT Gateway",
    0x22: "Embedded PC",
    0x23: "Mini PC",
    0x24: "Stick PC",
}

CHASSIS_STATES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Safe",
    0x04: "Warning",
    0x05: "Critical",
    0x06: "Non-recoverable",
}

SECURITY_STATUS = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "None",
    0x04: "External Interface Locked Out",
    0x05: "External Interface Enabled",
}

PROCESSOR_TYPES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Central Processor",
    0x04: "Math Processor",
    0x05: "DSP Processor",
    0x06: "Video Processor",
}

# Common entries of DSP0134 Table 23
PROCESSOR_FAMILIES = {
    0x01: "Other",
    0x02: "Unknown",
    0x0B: "Pentium",
    0x18: "AMD Duron",
    0x19: "K5",
    0x1A: "K6",
    0x28: "Intel Core Duo",
    0x29: "Intel Core Duo mobile",
    0x2A: "Intel Core Solo mobile",
    0x2B: "Intel Atom",
    0x2C: "Intel Core M",
    0x2D: "Intel Core m3",
    0x2E: "Intel Core m5",
    0x2F: "Intel Core m7",
    0x6B: "AMD Zen",
    0xB3: "Intel Xeon",
    0xB5: "Intel Xeon MP",
    0xBF: "Intel Core 2 Duo",
    0xC6: "Intel Core i7",
    0xC7: "Dual-Core Intel Celeron",
    0xCD: "Intel Core i5",
    0xCE: "Intel Core i3",
    0xCF: "Intel Core i9",
    0xE6: "Embedded AMD Opteron Quad-Core",
    0xFE: "See Processor Family 2",
    0x100: "ARMv7",
    0x101: "ARMv8",
    0x102: "ARMv9",
    0x118: "ARM",
    0x119: "StrongARM",
    0x12C: "6x86",
    0x200: "RISC-V RV32",
    0x201: "RISC-V RV64",
    0x202: "RISC-V RV128",
    0x258: "LoongArch",
}

PROCESSOR_UPGRADES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Daughter Board",
    0x04: "ZIF Socket",
    0x05: "Replaceable Piggy Back",
    0x06: "None",
    0x07: "LIF Socket",
    0x08: "Slot 1",
    0x09: "Slot 2",
    0x0A: "370-pin socket",
    0x0F: "Socket mPGA604",
    0x12: "Socket 754",
    0x13: "Socket 940",
    0x14: "Socket 939",
    0x19: "Socket LGA775",
    0x1A: "Socket S1",
    0x1D: "Socket LGA1366",
    0x22: "Socket LGA1155",
    0x24: "Socket LGA1150",
    0x2B: "Socket LGA1151",
    0x37: "Socket LGA3647-1",
    0x3C: "Socket LGA1200",
    0x3D: "Socket LGA4189",
    0x3E: "Socket LGA1700",
    0x41: "Socket AM5",
}

CACHE_ERROR_CORRECTION = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "None",
    0x04: "Parity",
    0x05: "Single-bit ECC",
    0x06: "Multi-bit ECC",
}

SYSTEM_CACHE_TYPES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Instruction",
    0x04: "Data",
    0x05: "Unified",
}

CACHE_ASSOCIATIVITY = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "Direct Mapped",
    0x04: "2-way Set-Associative",
    0x05: "4-way Set-Associative",
    0x06: "Fully Associative",
    0x07: "8-way Set-Associative",
    0x08: "16-way Set-Associative",
    0x09: "12-way Set-Associative",
    0x0A: "24-way Set-Associative",
    0x0B: "32-way Set-Associative",
    0x0C: "48-way Set-Associative",
    0x0D: "64-way Set-Associative",
    0x0E: "20-way Set-Associative",
}

MEMORY_ARRAY_LOCATIONS = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "System Board or Motherboard",
    0x04: "ISA Add-on Card",
    0x05: "EISA Add-on Card",
    0x06: "PCI Add-on Card",
    0x07: "MCA Add-on Card",
    0x08: "PCMCIA Add-on Card",
    0x09: "Proprietary Add-on Card",
    0x0A: "NuBus",
    0xA0: "PC-98/C20 Add-on Card",
    0xA1: "PC-98/C24 Add-on Card",
    0xA2: "PC-98/E Add-on Card",
    0xA3: "PC-98/Local Bus Add-on Card",
    0xA4: "CXL Add-on Card",
}

MEMORY_ARRAY_USES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "System Memory",
    0x04: "Video Memory",
    0x05: "Flash Memory",
    0x06: "Non-volatile RAM",
    0x07: "Cache Memory",
}

MEMORY_ARRAY_ERROR_CORRECTION = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "None",
    0x04: "Parity",
    0x05: "Single-bit ECC",
    0x06: "Multi-bit ECC",
    0x07: "CRC",
}

MEMORY_FORM_FACTORS = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "SIMM",
    0x04: "SIP",
    0x05: "Chip",
    0x06: "DIP",
    0x07: "ZIP",
    0x08: "Proprietary Card",
    0x09: "DIMM",
    0x0A: "TSOP",
    0x0B: "Row of chips",
    0x0C: "RIMM",
    0x0D: "SODIMM",
    0x0E: "SRIMM",
    0x0F: "FB-DIMM",
    0x10: "Die",
    0x11: "CAMM",
}

MEMORY_TYPES = {
    0x01: "Other",
    0x02: "Unknown",
    0x03: "DRAM",
    0x04: "EDRAM",
    0x05: "VRAM",
    0x06: "SRAM",
    0x07: "RAM",
    0x08: "ROM",
    0x09: "FLASH",
    0x0A: "EEPROM",
    0x0B: "FEPROM",
    0x0C: "EPROM",
    0x0D: "CDRAM",
    0x0E: "3DRAM",
    0x0F: "SDRAM",
    0x10: "SGRAM",
    0x11: "RDRAM",
    0x12: "DDR",
    0x13: "DDR2",
    0x14: "DDR2 FB-DIMM",
    0x18: "DDR3",
    0x19: "FBD2",
    0x1A: "DDR4",
    0x1B: "LPDDR",
    0x1C: "LPDDR2",
    0x1D: "LPDDR3",
    0x1E: "LPDDR4",
    0x1F: "Logical non-volatile device",
    0x20: "HBM",
    0x21: "HBM2",
    0x22: "DDR5",
    0x23: "LPDDR5",
    0x24: "HBM3",
}


def type_name(struct_type: int) -> str:
    """Human-readable name for a structure type code."""
    name = STRUCTURE_TYPES.get(struct_type)
    if name is not None:
        return name
    if struct_type >= 128:
        return "OEM-specific"
    return "Unknown"


def enum_name(table: Dict[int, str], value: Optional[int]) -> str:
    """Look up an enumerated value, falling back to its hex code."""
    if value is None:
        return "Unknown"
    return table.get(value, f"Unknown (0x{value:02X})")

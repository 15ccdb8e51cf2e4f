"""Field layouts for the structure types decoded beyond the generic view.

Offsets are from the start of the structure, header included, exactly as
listed in DSP0134. Sizes and addresses are normalized to bytes; speeds are
MT/s; voltages are millivolts.
"""

from typing import Dict, Tuple

from smbios_decoder.structures.fields import BYTES, HANDLE, STRING, Field
from smbios_decoder.structures.bitfields import (
    BaseboardFeatures,
    BIOSCharacteristics,
    BIOSCharacteristicsExt1,
    BIOSCharacteristicsExt2,
    CacheConfiguration,
    ChassisTypeByte,
    MemoryDeviceAttributes,
    MemoryTypeDetail,
    ProcessorCharacteristics,
    ProcessorStatus,
    ProcessorVoltage,
)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def _rom_size(raw: int) -> int:
    # 64K blocks, minus one
    return (raw + 1) * 64 * KB


def _extended_rom_size(raw: int) -> int:
    size = raw & 0x3FFF
    unit = (raw >> 14) & 0x03
    return size * (GB if unit == 1 else MB)


def _cache_size(raw: int) -> int:
    # Bit 15 selects 64K granularity
    if raw & 0x8000:
        return (raw & 0x7FFF) * 64 * KB
    return raw * KB


def _cache_size_2(raw: int) -> int:
    # Bit 31 selects 64K granularity
    if raw & 0x80000000:
        return (raw & 0x7FFFFFFF) * 64 * KB
    return raw * KB


def _memory_device_size(raw: int) -> int:
    # Bit 15 set: value in KB, clear: value in MB
    if raw & 0x8000:
        return (raw & 0x7FFF) * KB
    return raw * MB


def _kilobytes(raw: int) -> int:
    return raw * KB


def _megabytes(raw: int) -> int:
    return raw * MB


# Type 0
BIOS_INFORMATION = (
    Field("vendor", 0x04, kind=STRING),
    Field("version", 0x05, kind=STRING),
    Field("starting_address_segment", 0x06, 2),
    Field("release_date", 0x08, kind=STRING),
    Field("rom_size", 0x09, sentinel=0xFF, overflow="extended_rom_size", convert=_rom_size),
    Field("characteristics", 0x0A, 8, convert=BIOSCharacteristics),
    Field("characteristics_ext1", 0x12, convert=BIOSCharacteristicsExt1),
    Field("characteristics_ext2", 0x13, convert=BIOSCharacteristicsExt2),
    Field("system_bios_major_release", 0x14, unknown=0xFF),
    Field("system_bios_minor_release", 0x15, unknown=0xFF),
    Field("ec_major_release", 0x16, unknown=0xFF),
    Field("ec_minor_release", 0x17, unknown=0xFF),
    Field("extended_rom_size", 0x18, 2, convert=_extended_rom_size),
)

# Type 1
SYSTEM_INFORMATION = (
    Field("manufacturer", 0x04, kind=STRING),
    Field("product_name", 0x05, kind=STRING),
    Field("version", 0x06, kind=STRING),
    Field("serial_number", 0x07, kind=STRING),
    Field("uuid", 0x08, 16, kind=BYTES),
    Field("wake_up_type", 0x18),
    Field("sku_number", 0x19, kind=STRING),
    Field("family", 0x1A, kind=STRING),
)

# Type 2
BASEBOARD_INFORMATION = (
    Field("manufacturer", 0x04, kind=STRING),
    Field("product", 0x05, kind=STRING),
    Field("version", 0x06, kind=STRING),
    Field("serial_number", 0x07, kind=STRING),
    Field("asset_tag", 0x08, kind=STRING),
    Field("feature_flags", 0x09, convert=BaseboardFeatures),
    Field("location_in_chassis", 0x0A, kind=STRING),
    Field("chassis_handle", 0x0B, 2, kind=HANDLE),
    Field("board_type", 0x0D),
    Field("contained_object_handle_count", 0x0E),
)

# Type 3 (the SKU string follows the variable-length contained elements)
SYSTEM_ENCLOSURE = (
    Field("manufacturer", 0x04, kind=STRING),
    Field("type", 0x05, convert=ChassisTypeByte),
    Field("version", 0x06, kind=STRING),
    Field("serial_number", 0x07, kind=STRING),
    Field("asset_tag", 0x08, kind=STRING),
    Field("boot_up_state", 0x09),
    Field("power_supply_state", 0x0A),
    Field("thermal_state", 0x0B),
    Field("security_status", 0x0C),
    Field("oem_defined", 0x0D, 4),
    Field("height", 0x11, unknown=0),
    Field("power_cord_count", 0x12, unknown=0),
    Field("contained_element_count", 0x13),
    Field("contained_element_record_length", 0x14),
)

# Type 4
PROCESSOR_INFORMATION = (
    Field("socket_designation", 0x04, kind=STRING),
    Field("processor_type", 0x05),
    Field("processor_family", 0x06, sentinel=0xFE, overflow="processor_family_2"),
    Field("processor_manufacturer", 0x07, kind=STRING),
    Field("processor_id", 0x08, 8),
    Field("processor_version", 0x10, kind=STRING),
    Field("voltage", 0x11, convert=ProcessorVoltage),
    Field("external_clock", 0x12, 2, unknown=0),
    Field("max_speed", 0x14, 2, unknown=0),
    Field("current_speed", 0x16, 2, unknown=0),
    Field("status", 0x18, convert=ProcessorStatus),
    Field("processor_upgrade", 0x19),
    Field("l1_cache_handle", 0x1A, 2, kind=HANDLE, unknown=0xFFFF),
    Field("l2_cache_handle", 0x1C, 2, kind=HANDLE, unknown=0xFFFF),
    Field("l3_cache_handle", 0x1E, 2, kind=HANDLE, unknown=0xFFFF),
    Field("serial_number", 0x20, kind=STRING),
    Field("asset_tag", 0x21, kind=STRING),
    Field("part_number", 0x22, kind=STRING),
    Field("core_count", 0x23, sentinel=0xFF, overflow="core_count_2", unknown=0),
    Field("core_enabled", 0x24, sentinel=0xFF, overflow="core_enabled_2", unknown=0),
    Field("thread_count", 0x25, sentinel=0xFF, overflow="thread_count_2", unknown=0),
    Field("processor_characteristics", 0x26, 2, convert=ProcessorCharacteristics),
    Field("processor_family_2", 0x28, 2),
    Field("core_count_2", 0x2A, 2, unknown=0),
    Field("core_enabled_2", 0x2C, 2, unknown=0),
    Field("thread_count_2", 0x2E, 2, unknown=0),
    Field("thread_enabled", 0x30, 2, unknown=0),
)

# Type 7 (sizes in bytes)
CACHE_INFORMATION = (
    Field("socket_designation", 0x04, kind=STRING),
    Field("configuration", 0x05, 2, convert=CacheConfiguration),
    Field("maximum_cache_size", 0x07, 2, sentinel=0xFFFF, overflow="maximum_cache_size_2",
          convert=_cache_size),
    Field("installed_size", 0x09, 2, sentinel=0xFFFF, overflow="installed_cache_size_2",
          convert=_cache_size),
    Field("supported_sram_type", 0x0B, 2),
    Field("current_sram_type", 0x0D, 2),
    Field("cache_speed", 0x0F, unknown=0),
    Field("error_correction_type", 0x10),
    Field("system_cache_type", 0x11),
    Field("associativity", 0x12),
    Field("maximum_cache_size_2", 0x13, 4, convert=_cache_size_2),
    Field("installed_cache_size_2", 0x17, 4, convert=_cache_size_2),
)

# Type 11
OEM_STRINGS = (
    Field("count", 0x04),
)

# Type 16 (capacities in bytes; the extended field is already in bytes)
PHYSICAL_MEMORY_ARRAY = (
    Field("location", 0x04),
    Field("use", 0x05),
    Field("memory_error_correction", 0x06),
    Field("maximum_capacity", 0x07, 4, sentinel=0x80000000, overflow="extended_maximum_capacity",
          convert=_kilobytes),
    Field("memory_error_information_handle", 0x0B, 2, kind=HANDLE, unknown=0xFFFE),
    Field("number_of_memory_devices", 0x0D, 2),
    Field("extended_maximum_capacity", 0x0F, 8),
)

# Type 17 (sizes in bytes, speeds in MT/s, voltages in mV)
MEMORY_DEVICE = (
    Field("physical_memory_array_handle", 0x04, 2, kind=HANDLE),
    Field("memory_error_information_handle", 0x06, 2, kind=HANDLE, unknown=0xFFFE),
    Field("total_width", 0x08, 2, unknown=0xFFFF),
    Field("data_width", 0x0A, 2, unknown=0xFFFF),
    Field("size", 0x0C, 2, sentinel=0x7FFF, overflow="extended_size", unknown=0xFFFF,
          convert=_memory_device_size),
    Field("form_factor", 0x0E),
    Field("device_set", 0x0F, unknown=0xFF),
    Field("device_locator", 0x10, kind=STRING),
    Field("bank_locator", 0x11, kind=STRING),
    Field("memory_type", 0x12),
    Field("type_detail", 0x13, 2, convert=MemoryTypeDetail),
    Field("speed", 0x15, 2, sentinel=0xFFFF, overflow="extended_speed", unknown=0),
    Field("manufacturer", 0x17, kind=STRING),
    Field("serial_number", 0x18, kind=STRING),
    Field("asset_tag", 0x19, kind=STRING),
    Field("part_number", 0x1A, kind=STRING),
    Field("attributes", 0x1B, convert=MemoryDeviceAttributes),
    Field("extended_size", 0x1C, 4, mask=0x7FFFFFFF, convert=_megabytes),
    Field("configured_memory_speed", 0x20, 2, sentinel=0xFFFF,
          overflow="extended_configured_memory_speed", unknown=0),
    Field("minimum_voltage", 0x22, 2, unknown=0),
    Field("maximum_voltage", 0x24, 2, unknown=0),
    Field("configured_voltage", 0x26, 2, unknown=0),
    Field("memory_technology", 0x28),
    Field("memory_operating_mode_capability", 0x29, 2),
    Field("firmware_version", 0x2B, kind=STRING),
    Field("module_manufacturer_id", 0x2C, 2, unknown=0),
    Field("module_product_id", 0x2E, 2, unknown=0),
    Field("memory_subsystem_controller_manufacturer_id", 0x30, 2, unknown=0),
    Field("memory_subsystem_controller_product_id", 0x32, 2, unknown=0),
    Field("non_volatile_size", 0x34, 8, unknown=0xFFFFFFFFFFFFFFFF),
    Field("volatile_size", 0x3C, 8, unknown=0xFFFFFFFFFFFFFFFF),
    Field("cache_size", 0x44, 8, unknown=0xFFFFFFFFFFFFFFFF),
    Field("logical_size", 0x4C, 8, unknown=0xFFFFFFFFFFFFFFFF),
    Field("extended_speed", 0x54, 4, mask=0x7FFFFFFF),
    Field("extended_configured_memory_speed", 0x58, 4, mask=0x7FFFFFFF),
    Field("pmic0_manufacturer_id", 0x5C, 2, unknown=0),
    Field("pmic0_revision_number", 0x5E, 2, unknown=0xFF00),
    Field("rcd_manufacturer_id", 0x60, 2, unknown=0),
    Field("rcd_revision_number", 0x62, 2, unknown=0xFF00),
)

# Type 19 (addresses in bytes)
MEMORY_ARRAY_MAPPED_ADDRESS = (
    Field("starting_address", 0x04, 4, sentinel=0xFFFFFFFF, overflow="extended_starting_address",
          convert=_kilobytes),
    Field("ending_address", 0x08, 4, sentinel=0xFFFFFFFF, overflow="extended_ending_address",
          convert=_kilobytes),
    Field("memory_array_handle", 0x0C, 2, kind=HANDLE),
    Field("partition_width", 0x0E),
    Field("extended_starting_address", 0x0F, 8),
    Field("extended_ending_address", 0x17, 8),
)

# Type 127 has nothing past the header
END_OF_TABLE = ()

LAYOUTS: Dict[int, Tuple[Field, ...]] = {
    0: BIOS_INFORMATION,
    1: SYSTEM_INFORMATION,
    2: BASEBOARD_INFORMATION,
    3: SYSTEM_ENCLOSURE,
    4: PROCESSOR_INFORMATION,
    7: CACHE_INFORMATION,
    11: OEM_STRINGS,
    16: PHYSICAL_MEMORY_ARRAY,
    17: MEMORY_DEVICE,
    19: MEMORY_ARRAY_MAPPED_ADDRESS,
    127: END_OF_TABLE,
}

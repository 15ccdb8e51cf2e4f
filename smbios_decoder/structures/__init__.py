"""Per-type structure decoding on top of the table walker.

Types with a layout in ``layouts.LAYOUTS`` are resolved field by field;
every other type is reported generically (header, raw bytes, strings).
"""

from typing import Any, Dict, Iterable, List, Optional

from smbios_decoder.errors import MalformedStructureError
from smbios_decoder.discovery.table_walker import Structure
from smbios_decoder.structures.fields import Field, ResolvedFields, resolve_fields, STRING
from smbios_decoder.structures.layouts import LAYOUTS
from smbios_decoder.structures.bitfields import BitField
from smbios_decoder.structures.names import (
    BOARD_TYPES,
    CACHE_ASSOCIATIVITY,
    CACHE_ERROR_CORRECTION,
    CHASSIS_STATES,
    CHASSIS_TYPES,
    MEMORY_ARRAY_ERROR_CORRECTION,
    MEMORY_ARRAY_LOCATIONS,
    MEMORY_ARRAY_USES,
    MEMORY_FORM_FACTORS,
    MEMORY_TYPES,
    PROCESSOR_FAMILIES,
    PROCESSOR_TYPES,
    PROCESSOR_UPGRADES,
    SECURITY_STATUS,
    STRUCTURE_TYPES,
    SYSTEM_CACHE_TYPES,
    WAKE_UP_TYPES,
    enum_name,
    type_name,
)

__all__ = [
    "StructureParser",
    "decode_structure",
    "type_name",
    "STRUCTURE_TYPES",
]

# Enumerated fields rendered with a companion "<field>_name" entry
ENUM_FIELDS = {
    1: {"wake_up_type": WAKE_UP_TYPES},
    2: {"board_type": BOARD_TYPES},
    3: {
        "boot_up_state": CHASSIS_STATES,
        "power_supply_state": CHASSIS_STATES,
        "thermal_state": CHASSIS_STATES,
        "security_status": SECURITY_STATUS,
    },
    4: {
        "processor_type": PROCESSOR_TYPES,
        "processor_family": PROCESSOR_FAMILIES,
        "processor_upgrade": PROCESSOR_UPGRADES,
    },
    7: {
        "error_correction_type": CACHE_ERROR_CORRECTION,
        "system_cache_type": SYSTEM_CACHE_TYPES,
        "associativity": CACHE_ASSOCIATIVITY,
    },
    16: {
        "location": MEMORY_ARRAY_LOCATIONS,
        "use": MEMORY_ARRAY_USES,
        "memory_error_correction": MEMORY_ARRAY_ERROR_CORRECTION,
    },
    17: {
        "form_factor": MEMORY_FORM_FACTORS,
        "memory_type": MEMORY_TYPES,
    },
}


def decode_structure(structure: Structure, expected_type: Optional[int] = None) -> ResolvedFields:
    """Resolve a structure against its type's layout.

    Args:
        structure: Structure from the walker.
        expected_type: When given, the structure must be of this type.

    Raises:
        MalformedStructureError: Type mismatch, or no layout for the type.
    """
    struct_type = structure.header.type
    if expected_type is not None and struct_type != expected_type:
        raise MalformedStructureError(
            f"Expected a type {expected_type} structure, got type {struct_type} "
            f"(handle 0x{structure.header.handle:04x})"
        )
    layout = LAYOUTS.get(struct_type)
    if layout is None:
        raise MalformedStructureError(f"No field layout for structure type {struct_type}")

    fields: List[Field] = list(layout)
    if struct_type == 3:
        fields.append(_chassis_sku_field(structure))
    return resolve_fields(structure, fields)


def _chassis_sku_field(structure: Structure) -> Field:
    count = structure.get_byte(0x13)
    record_length = structure.get_byte(0x14)
    return Field("sku_number", 0x15 + count * record_length, kind=STRING)


def _contained_handles(structure: Structure) -> List[int]:
    """Type 2 contained object handles (count at 0x0E, handles from 0x0F)."""
    count = structure.get_byte(0x0E)
    handles = []
    for i in range(count):
        offset = 0x0F + i * 2
        if offset + 2 > len(structure.data):
            break
        handles.append(structure.get_word(offset))
    return handles


class StructureParser:
    """Turn walker structures into plain dictionaries."""

    @staticmethod
    def parse(structure: Structure) -> Dict[str, Any]:
        """Parse one structure.

        Returns:
            Dictionary with header information, resolved fields under
            ``content`` (or raw bytes for types without a layout) and the
            absent/unknown field names.
        """
        header = structure.header
        result: Dict[str, Any] = {
            "handle": f"0x{header.handle:04x}",
            "type": header.type,
            "type_name": type_name(header.type),
            "length": header.length,
            "strings": list(structure.strings),
        }

        if header.type not in LAYOUTS:
            result["content"] = {
                "raw_hex": structure.data[4:].hex() if len(structure.data) > 4 else "(empty)",
            }
            return result

        resolved = decode_structure(structure)
        content = StructureParser._render(header.type, resolved)

        if header.type == 2:
            content["contained_object_handles"] = [
                f"0x{h:04x}" for h in _contained_handles(structure)
            ]
        elif header.type == 11:
            content["oem_strings"] = list(structure.strings)

        result["content"] = content
        result["absent"] = sorted(resolved.absent)
        result["unknown"] = sorted(resolved.unknown)
        return result

    @staticmethod
    def _render(struct_type: int, resolved: ResolvedFields) -> Dict[str, Any]:
        """Resolved values made JSON friendly (bytes to hex, names added)."""
        content: Dict[str, Any] = {}
        enums = ENUM_FIELDS.get(struct_type, {})

        for name, value in resolved.values.items():
            if isinstance(value, bytes):
                value = value.hex()
            elif isinstance(value, BitField):
                # Bit-field wrappers keep their raw value plus flag names
                content[f"{name}_flags"] = value.names()
                value = int(value)
            content[name] = value

            if name in enums and name not in resolved.absent:
                content[f"{name}_name"] = enum_name(enums[name], value)

        if struct_type == 3 and resolved.values.get("type") is not None:
            chassis = resolved.values["type"]
            content["type_name"] = enum_name(CHASSIS_TYPES, chassis.chassis_type)
            content["lock_present"] = chassis.lock_present

        return content

    @staticmethod
    def parse_batch(structures: Iterable[Structure]) -> List[Dict[str, Any]]:
        """Parse every structure in order."""
        return [StructureParser.parse(s) for s in structures]

"""Versioned, sentinel-aware field resolution.

Every structure type grows over SMBIOS revisions: newer fields are appended
and older tables simply stop short. A field is read only when the formatted
section is long enough to hold it. Some narrow fields reserve a sentinel
value meaning "see the wider overflow field"; others reserve a value meaning
only "unknown". Each ``Field`` says which of the two applies, so the rules
live in data instead of per-type conditionals.
"""

from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional
from dataclasses import dataclass, field

from smbios_decoder.discovery.table_walker import Structure

INT = "int"
STRING = "string"
BYTES = "bytes"
HANDLE = "handle"

_READERS = {
    1: Structure.get_byte,
    2: Structure.get_word,
    4: Structure.get_dword,
    8: Structure.get_qword,
}


@dataclass(frozen=True)
class Field:
    """Descriptor for one formatted-section field.

    Attributes:
        name: Key in the resolved output.
        offset: Byte offset from the start of the structure (header included).
        width: Byte width (1, 2, 4 or 8 for integers; any for BYTES).
        kind: INT, HANDLE, STRING (1-byte string index) or BYTES (raw span).
        min_length: Structure length at which the field exists
            (defaults to ``offset + width``).
        sentinel: Raw value that defers to ``overflow`` when that field is present.
        overflow: Name of the wider field consulted on ``sentinel``.
        unknown: Raw value meaning "unknown" (resolves to None).
        mask: Applied to the raw integer before ``convert``.
        convert: Maps the masked raw integer to the reported value.
    """
    name: str
    offset: int
    width: int = 1
    kind: str = INT
    min_length: Optional[int] = None
    sentinel: Optional[int] = None
    overflow: Optional[str] = None
    unknown: Optional[int] = None
    mask: Optional[int] = None
    convert: Optional[Callable[[int], Any]] = None

    @property
    def required_length(self) -> int:
        if self.min_length is not None:
            return self.min_length
        return self.offset + self.width

    def is_present(self, structure: Structure) -> bool:
        return len(structure.data) >= self.required_length

    def read_raw(self, structure: Structure) -> Any:
        """Raw value without sentinel handling (caller checks presence)."""
        if self.kind == BYTES:
            return bytes(structure.data[self.offset:self.offset + self.width])
        if self.kind == STRING:
            return structure.get_byte(self.offset)
        return _READERS[self.width](structure, self.offset)

    def finish(self, structure: Structure, raw: Any) -> Any:
        """Turn a raw value into the reported one (mask, string lookup, convert)."""
        if self.kind == STRING:
            return structure.get_string(raw)
        if self.kind == BYTES:
            return raw
        value = raw & self.mask if self.mask is not None else raw
        if self.convert is not None:
            return self.convert(value)
        return value


@dataclass
class ResolvedFields:
    """Outcome of resolving a layout against one structure."""
    values: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)
    absent: FrozenSet[str] = frozenset()
    unknown: FrozenSet[str] = frozenset()
    sources: Dict[str, str] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str, default: Any = None) -> Any:
        value = self.values.get(name)
        return default if value is None else value

    def is_present(self, name: str) -> bool:
        return name in self.values and name not in self.absent

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.values)


def resolve_fields(structure: Structure, fields: Iterable[Field]) -> ResolvedFields:
    """Resolve every field of a layout against ``structure``.

    Rules, per field:
      1. Shorter than the field's required length: absent, value None.
      2. Raw value equals ``sentinel`` and the ``overflow`` field is present:
         the overflow field's value wins.
      3. Raw value equals ``unknown``: value None, listed as unknown.
      4. Otherwise the literal value (a sentinel with no overflow present
         is kept as-is).
    """
    layout: List[Field] = list(fields)
    by_name = {f.name: f for f in layout}

    raw: Dict[str, Any] = {}
    absent = set()
    for f in layout:
        if f.is_present(structure):
            raw[f.name] = f.read_raw(structure)
        else:
            absent.add(f.name)

    values: Dict[str, Any] = {}
    unknown = set()
    sources: Dict[str, str] = {}

    def literal(f: Field) -> Any:
        if f.unknown is not None and raw[f.name] == f.unknown:
            unknown.add(f.name)
            return None
        return f.finish(structure, raw[f.name])

    for f in layout:
        if f.name in absent:
            values[f.name] = None
            continue

        if f.sentinel is not None and raw[f.name] == f.sentinel and f.overflow:
            wide = by_name.get(f.overflow)
            if wide is not None and wide.name in raw:
                values[f.name] = literal(wide)
                sources[f.name] = wide.name
                if wide.name in unknown:
                    unknown.add(f.name)
                continue

        values[f.name] = literal(f)
        sources[f.name] = f.name

    return ResolvedFields(
        values=values,
        raw=raw,
        absent=frozenset(absent),
        unknown=frozenset(unknown),
        sources=sources,
    )

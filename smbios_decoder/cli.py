"""CLI entry point for the SMBIOS decoder."""

import re
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from smbios_decoder import __version__
from smbios_decoder.errors import SMBIOSError
from smbios_decoder.archive import ARCHIVE_EXTENSION, read_archive, write_archive
from smbios_decoder.discovery import (
    DecodeResult,
    EntryPoint,
    EntryPointKind,
    SYSFS_ENTRY_POINT,
    SYSFS_TABLE,
    Structure,
    SystemReader,
)
from smbios_decoder.formatting import (
    format_handle,
    format_release,
    format_size,
    format_speed,
    format_uuid,
    format_voltage,
    printable,
)
from smbios_decoder.shared import DEFAULT_CONFIG_NAME, LOGGER_NAME, ConfigManager, LogManager
from smbios_decoder.structures import ENUM_FIELDS, StructureParser, decode_structure, type_name
from smbios_decoder.structures.bitfields import BitField, ChassisTypeByte
from smbios_decoder.structures.layouts import LAYOUTS
from smbios_decoder.structures.names import CHASSIS_TYPES, MEMORY_TYPES, enum_name

console = Console()
err_console = Console(stderr=True)

OUTPUT_FORMATS = ("text", "json", "raw", "bin")

RULE = "=" * 80


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_NAME,
    show_default=True,
    help="INI configuration file (ignored when missing)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def cli(ctx, config_path, debug):
    """SMBIOS Decoder - Inspect and archive SMBIOS firmware tables."""
    config = ConfigManager(config_path)
    config.load()

    level = "DEBUG" if debug else config.get("logging", "level", "WARNING")
    log_dir = config.get("logging", "log_dir") or None
    LogManager(LOGGER_NAME, log_dir, level)

    ctx.obj = config


def _fail(message: str):
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    raise click.exceptions.Exit(1)


def _load(config: ConfigManager, input_path: Optional[str]) -> DecodeResult:
    """Decode a dump file when given, otherwise the running system."""
    try:
        if input_path:
            result = read_archive(input_path)
            err_console.print(f"(Reading from dump file: {escape(str(input_path))})")
            return result

        reader = SystemReader(
            entry_point_path=config.get("sources", "entry_point", SYSFS_ENTRY_POINT),
            table_path=config.get("sources", "table", SYSFS_TABLE),
        )
        return reader.read()
    except SMBIOSError as e:
        _fail(f"Error reading SMBIOS data: {e}")


def _kind_label(entry_point: EntryPoint) -> str:
    if entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT:
        return "64-bit (SMBIOS 3.x)"
    return "32-bit (SMBIOS 2.x)"


def _table_length(entry_point: EntryPoint) -> int:
    if entry_point.kind is EntryPointKind.SIXTY_FOUR_BIT:
        return entry_point.max_table_size or 0
    return entry_point.table_length or 0


def _display(struct_type: int, name: str, value: Any) -> str:
    """Render one resolved field value for humans."""
    if value is None:
        return "Unknown"
    if isinstance(value, ChassisTypeByte):
        lock = ", lock present" if value.lock_present else ""
        return f"{enum_name(CHASSIS_TYPES, value.chassis_type)}{lock}"
    if isinstance(value, BitField):
        flags = value.names()
        return f"0x{int(value):X}" + (f" ({', '.join(flags)})" if flags else "")
    if isinstance(value, bytes):
        return format_uuid(value) if name == "uuid" else value.hex()
    if isinstance(value, str):
        return printable(value)

    enums = ENUM_FIELDS.get(struct_type, {})
    if name in enums:
        return enum_name(enums[name], value)
    if name.endswith("_handle"):
        return format_handle(value)
    if name.endswith(("size", "size_2", "capacity")):
        return format_size(value)
    if name.endswith("address"):
        return f"0x{value:X}"
    if "speed" in name:
        if struct_type == 17:
            return format_speed(value)
        if struct_type == 4:
            return f"{value} MHz"
        return f"{value} ns"
    if name.endswith("voltage") and struct_type == 17:
        return format_voltage(value)
    return str(value)


def _highlights(result: DecodeResult) -> List[Tuple[str, str, str]]:
    """(component, property, value) rows for the summary table."""
    rows: List[Tuple[str, str, str]] = []

    bios = result.get_structure(0)
    if bios is not None:
        f = decode_structure(bios)
        rows.append(("BIOS", "Vendor", printable(f.get("vendor", ""))))
        rows.append(("BIOS", "Version", printable(f.get("version", ""))))
        rows.append(("BIOS", "Release Date", printable(f.get("release_date", ""))))
        rows.append(("BIOS", "ROM Size", format_size(f["rom_size"])))
        rows.append(("BIOS", "BIOS Revision", format_release(
            f["system_bios_major_release"], f["system_bios_minor_release"])))
        ext2 = f["characteristics_ext2"]
        if ext2 is not None:
            rows.append(("BIOS", "UEFI", "Yes" if ext2.is_uefi else "No"))
            rows.append(("BIOS", "Virtual Machine", "Yes" if ext2.is_virtual_machine else "No"))

    system = result.get_structure(1)
    if system is not None:
        f = decode_structure(system)
        rows.append(("System", "Manufacturer", printable(f.get("manufacturer", ""))))
        rows.append(("System", "Product", printable(f.get("product_name", ""))))
        rows.append(("System", "Serial Number", printable(f.get("serial_number", ""))))
        rows.append(("System", "UUID", format_uuid(f["uuid"])))

    board = result.get_structure(2)
    if board is not None:
        f = decode_structure(board)
        rows.append(("Baseboard", "Manufacturer", printable(f.get("manufacturer", ""))))
        rows.append(("Baseboard", "Product", printable(f.get("product", ""))))

    chassis = result.get_structure(3)
    if chassis is not None:
        f = decode_structure(chassis)
        rows.append(("Chassis", "Type", _display(3, "type", f["type"])))

    for cpu in result.get_structures(4):
        f = decode_structure(cpu)
        label = f"Processor {printable(f.get('socket_designation', ''))}".strip()
        rows.append((label, "Version", printable(f.get("processor_version", ""))))
        rows.append((label, "Cores / Threads", f"{f.get('core_count', '?')} / {f.get('thread_count', '?')}"))
        rows.append((label, "Max Speed", _display(4, "max_speed", f["max_speed"])))

    total = 0
    for dimm in result.get_structures(17):
        f = decode_structure(dimm)
        size = f["size"]
        if not size:
            continue
        total += size
        label = f"Memory {printable(f.get('device_locator', ''))}".strip()
        rows.append((label, "Size", format_size(size)))
        rows.append((label, "Type", enum_name(MEMORY_TYPES, f["memory_type"])))
        rows.append((label, "Speed", format_speed(f["speed"])))
    if total:
        rows.append(("Memory", "Total Installed", format_size(total)))

    return rows


@cli.command()
@click.option("--input", "-i", "input_path", type=click.Path(), help="Read from a dump file instead of the system")
@click.pass_obj
def info(config, input_path):
    """Show the entry point and a summary of the decoded hardware."""
    result = _load(config, input_path)
    ep = result.entry_point

    console.print(f"\n[bold cyan]{ep.version_string}[/bold cyan]\n")
    console.print(f"  Entry point:   {_kind_label(ep)}")
    console.print(f"  Table address: 0x{ep.table_address:016X}")
    console.print(f"  Table length:  {_table_length(ep)} bytes")
    console.print(f"  Structures:    {len(result.structures)}")
    if not result.stop_reason.is_clean:
        console.print(f"  [yellow]⚠️  Walk stopped early: {result.stop_reason.value}[/yellow]")
    console.print()

    table = Table(title="System Summary")
    table.add_column("Component", style="cyan")
    table.add_column("Property")
    table.add_column("Value", style="green")
    for component, prop, value in _highlights(result):
        table.add_row(escape(component), prop, escape(value))
    console.print(table)

    counts = Table(title="Structure Types")
    counts.add_column("Type", justify="right")
    counts.add_column("Name")
    counts.add_column("Count", justify="right")
    for struct_type, count in sorted(result.type_counts().items()):
        counts.add_row(str(struct_type), type_name(struct_type), str(count))
    console.print(counts)


def _text_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(printable(v) if isinstance(v, str) else str(v) for v in value) or "(none)"
    if isinstance(value, str):
        return printable(value)
    return "Unknown" if value is None else str(value)


def render_text(result: DecodeResult) -> str:
    """Text listing of every structure."""
    ep = result.entry_point
    lines = [
        RULE,
        "SMBIOS DATA DUMP".center(80).rstrip(),
        RULE,
        f"Timestamp:      {datetime.now().isoformat(timespec='seconds')}",
        f"SMBIOS Version: {ep.version_string}",
        f"Entry Point:    {_kind_label(ep)}",
        f"Table Address:  0x{ep.table_address:016X}",
        f"Table Length:   {_table_length(ep)} bytes",
        f"Structures:     {len(result.structures)}",
        "",
        RULE,
        "STRUCTURE SUMMARY".center(80).rstrip(),
        RULE,
    ]
    for struct_type, count in sorted(result.type_counts().items()):
        lines.append(f"Type {struct_type:3d}: {count:2d} structure(s) - {type_name(struct_type)}")

    lines += ["", RULE, "STRUCTURE DETAILS".center(80).rstrip(), RULE]
    for parsed in StructureParser.parse_batch(result.structures):
        lines.append("")
        lines.append(f"Handle {parsed['handle']}, DMI type {parsed['type']}, {parsed['length']} bytes")
        lines.append(f"  {parsed['type_name']}")
        for key, value in parsed["content"].items():
            lines.append(f"    {key}: {_text_value(value)}")
        if parsed["strings"]:
            lines.append("    Strings:")
            for text in parsed["strings"]:
                lines.append(f"      {printable(text)}")

    lines += ["", RULE, "END OF DUMP".center(80).rstrip(), RULE]
    return "\n".join(lines) + "\n"


def render_json(result: DecodeResult) -> str:
    """JSON document with the entry point and every parsed structure."""
    ep = result.entry_point
    structures = []
    for s, parsed in zip(result.structures, StructureParser.parse_batch(result.structures)):
        parsed["data"] = s.data.hex()
        structures.append(parsed)

    document: Dict[str, Any] = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "version": ep.version_string,
        "entry_point": {
            "type": "64-bit" if ep.kind is EntryPointKind.SIXTY_FOUR_BIT else "32-bit",
            "major_version": ep.major_version,
            "minor_version": ep.minor_version,
            "revision": ep.revision,
            "table_address": f"0x{ep.table_address:016X}",
            "table_length": _table_length(ep),
        },
        "structures": structures,
        "summary": {
            "total_structures": len(result.structures),
            "type_counts": {str(t): c for t, c in sorted(result.type_counts().items())},
            "stop_reason": result.stop_reason.value,
        },
    }
    return json.dumps(document, indent=2) + "\n"


def _hex_rows(data: bytes, indent: str = "  ") -> List[str]:
    return [
        f"{indent}{offset:04x}: {data[offset:offset + 16].hex(' ')}"
        for offset in range(0, len(data), 16)
    ]


def render_raw(result: DecodeResult) -> str:
    """Hex listing of every structure's formatted section and strings."""
    lines = [f"# {result.entry_point.version_string}, {len(result.structures)} structure(s)"]
    for s in result.structures:
        lines.append("")
        lines.append(f"Handle 0x{s.handle:04X}, type {s.type} ({s.type_name}), {s.header.length} bytes")
        lines += _hex_rows(s.data)
        for index, text in enumerate(s.strings, 1):
            lines.append(f"  string {index}: {printable(text)}")
    return "\n".join(lines) + "\n"


def _archive_name(result: DecodeResult) -> str:
    """Dump file name from the system UUID, else serial number, else timestamp."""
    system = result.get_structure(1)
    if system is not None:
        f = decode_structure(system)
        uuid = f["uuid"]
        if uuid and uuid not in (b"\x00" * 16, b"\xff" * 16):
            return format_uuid(uuid).replace("-", "") + ARCHIVE_EXTENSION
        serial = f.get("serial_number", "")
        if serial and serial != "To Be Filled By O.E.M.":
            safe = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", printable(serial)).strip(" .")[:64]
            if safe:
                return safe + ARCHIVE_EXTENSION
    return datetime.now().strftime("%Y%m%d-%H%M%S") + ARCHIVE_EXTENSION


@cli.command()
@click.option("--input", "-i", "input_path", type=click.Path(), help="Read from a dump file instead of the system")
@click.option("--output", "-o", type=click.Path(), help="Output file (default: stdout; auto-named for bin)")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    help="Output format (default: [output] format from the config, else text)",
)
@click.pass_obj
def dump(config, input_path, output, output_format):
    """Dump every structure as text, JSON, hex, or a binary dump file."""
    output_format = (output_format or config.get("output", "format", "text")).lower()
    if output_format not in OUTPUT_FORMATS:
        _fail(f"Unknown output format '{output_format}'")

    result = _load(config, input_path)

    if output_format == "bin":
        target = Path(output) if output else Path(_archive_name(result))
        if target.suffix.lower() != ARCHIVE_EXTENSION:
            target = target.with_name(target.name + ARCHIVE_EXTENSION)
        try:
            write_archive(result, target)
        except OSError as e:
            _fail(f"Error writing dump file: {e}")
        err_console.print(f"Raw SMBIOS dump written to: {escape(str(target))}")
        err_console.print(f"Read with: smbios-decoder info -i {escape(str(target))}")
        return

    if output_format == "json":
        text = render_json(result)
    elif output_format == "raw":
        text = render_raw(result)
    else:
        text = render_text(result)

    if not output:
        click.echo(text, nl=False)
        return

    target = Path(output)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as e:
        _fail(f"Error writing output: {e}")
    err_console.print(f"SMBIOS data written to: {escape(str(target))}")


def _show_structure(structure: Structure):
    title = f"Handle 0x{structure.handle:04X}: {structure.type_name} (type {structure.type}, {structure.header.length} bytes)"
    table = Table(title=escape(title))
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    if structure.type not in LAYOUTS:
        table.add_row("raw", structure.data[4:].hex() or "(empty)")
    else:
        fields = decode_structure(structure)
        for name, value in fields.values.items():
            if name in fields.absent:
                shown = "[dim]absent[/dim]"
            elif name in fields.unknown:
                shown = "[yellow]Unknown[/yellow]"
            else:
                shown = escape(_display(structure.type, name, value))
                source = fields.sources.get(name)
                if source and source != name:
                    shown += f" [dim](from {source})[/dim]"
            table.add_row(name, shown)

    for index, text in enumerate(structure.strings, 1):
        table.add_row(f"string {index}", escape(printable(text)))
    console.print(table)


@cli.command()
@click.argument("struct_type", metavar="TYPE", type=click.IntRange(0, 255))
@click.option("--input", "-i", "input_path", type=click.Path(), help="Read from a dump file instead of the system")
@click.pass_obj
def show(config, struct_type, input_path):
    """Show the resolved fields of every structure of one TYPE."""
    result = _load(config, input_path)
    structures = result.get_structures(struct_type)
    if not structures:
        console.print(f"[yellow]No type {struct_type} ({type_name(struct_type)}) structures found[/yellow]")
        return
    for structure in structures:
        _show_structure(structure)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()

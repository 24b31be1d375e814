"""Fill in a patch template from ROM symbols and check it covers every change."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from crystaltools.common import ToolError, UsageError, _read_file, _run, _write_file

PROGRAM = "make_patch"
USAGE = "values.sym patched.gbc original.gbc vc.patch.template vc.patch"

BANK_SIZE = 0x4000
ROM_SIZE = 128 * BANK_SIZE
CHECKSUM_PATCH_OFFSET = 0x14E
CHECKSUM_PATCH_SIZE = 2
# Base data, Stadium header and the half-bank checksums written by the stadium tool
STADIUM_SIZE = 24 + 6 + 2 + 128 * 2 * 2

_C_SPACE = " \t\n\v\f\r"
_SPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")
_SYMBOL_FIELD_SEP = re.compile(r"[ \t]+")
_LINE_SEP = re.compile(r"[\r\n]")
_TEMPLATE_SPECIAL = re.compile(r"[;{\[]")

_NUMBER_AUTO = re.compile(
    r"[ \t\n\v\f\r]*([+-]?)(?:0[xX]([0-9a-fA-F]+)|(0[0-7]*)|([1-9][0-9]*))"
)
_NUMBER_HEX = re.compile(r"[ \t\n\v\f\r]*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")
_INT_MAX = 0x7FFFFFFF

_OPERATORS = ("==", ">", "<", ">=", "<=", "!=", "||")

_PATCH_COMMANDS = frozenset({"patch", "PATCH", "patch_", "PATCH_", "patch/", "PATCH/"})
_DWS_COMMANDS = frozenset({"dws", "DWS", "dws_", "DWS_", "dws/", "DWS/"})
_DB_COMMANDS = frozenset({"db", "DB", "db_", "DB_", "db/", "DB/"})
_HEX_STEMS = frozenset({"hex", "HEX", "HEx", "Hex", "heX", "hEX"})


@dataclass(frozen=True)
class Symbol:
    """A named address, with its offset in the ROM or in RAM."""

    name: str
    address: int
    offset: int


@dataclass(frozen=True)
class Patch:
    """A span of the ROM that the patch is allowed to change."""

    offset: int
    size: int


class SymbolTable:
    """Symbols looked up newest first, with local-label suffix matching."""

    def __init__(self, symbols: Iterable[Symbol] = ()) -> None:
        self._symbols: list[Symbol] = list(symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return reversed(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def add(self, name: str, bank: int, address: int) -> Symbol:
        """Add a symbol, working out its offset from its bank and address."""
        if address < 0x8000:
            # ROM addresses are relative to their bank
            offset = address + (bank - 1) * BANK_SIZE if bank > 0 else address
        else:
            # RAM addresses are relative to the start of all RAM
            offset = address - 0x8000
        symbol = Symbol(name, address, offset)
        self._symbols.append(symbol)
        return symbol

    def find(self, name: str) -> Symbol:
        """Find a symbol by name; a name starting with "." matches a local label."""
        local = name.startswith(".")
        for symbol in self:
            if len(name) > len(symbol.name):
                continue
            candidate = symbol.name[len(symbol.name) - len(name) :] if local else symbol.name
            if candidate == name:
                return symbol
        raise ToolError(f'Error: Unknown symbol: "{name}"')


def parse_number(text: str, base: int = 0) -> int:
    """Parse a whole non-negative integer, in base 16 or with C prefix rules."""
    if base not in (0, 16):
        raise ValueError(f"unsupported base: {base}")
    pattern = _NUMBER_HEX if base == 16 else _NUMBER_AUTO
    match = pattern.match(text)
    if match is None or match.end() != len(text):
        raise ToolError(f'Error: Cannot parse number: "{text}"')
    if base == 16:
        value = int(match.group(2), 16)
    else:
        hex_digits, octal, decimal = match.group(2, 3, 4)
        if hex_digits is not None:
            value = int(hex_digits, 16)
        elif octal is not None:
            value = int(octal, 8)
        else:
            value = int(decimal)
    if match.group(1) == "-":
        value = -value
    if value < 0 or value > _INT_MAX:
        raise ToolError(f'Error: Cannot parse number: "{text}"')
    return value


def _parse_symbol_value(text: str) -> tuple[int, int]:
    if ":" in text:
        bank, address = text.split(":", 1)
        return parse_number(bank, 16), parse_number(address, 16)
    return 0, parse_number(text, 16)


def parse_symbols(text: str) -> SymbolTable:
    """Read "bank:address name" lines of a symbol file into a table."""
    table = SymbolTable()
    for line in _LINE_SEP.split(text):
        fields = [f for f in _SYMBOL_FIELD_SEP.split(line.split(";", 1)[0]) if f]
        if len(fields) < 2:
            continue
        bank, address = _parse_symbol_value(fields[0])
        table.add(fields[1], bank, address)
    return table


def parse_arg_value(
    arg: str, absolute: bool, symbols: SymbolTable, patch_name: str | None
) -> int:
    """Evaluate a command argument: an operator, a number or a symbol expression."""
    if arg in _OPERATORS:
        index = _OPERATORS.index(arg)
        return 0x11 if arg == "||" else index

    if arg[:1].isdigit() or arg.startswith("+"):
        return parse_number(arg, 0)

    part = ""
    if arg.startswith(("<", ">")):
        part, arg = arg[0], arg[1:]

    offset_mod = 0
    plus = arg.find("+")
    if plus >= 0:
        offset_mod = parse_number(arg[plus:], 0)
        arg = arg[:plus]

    if arg == "@":
        if patch_name is None:
            raise ToolError('Error: No current patch for "@"')
        arg = patch_name
    symbol = symbols.find(arg)

    value = (symbol.offset if absolute else symbol.address) + offset_mod
    if part == "<":
        return value & 0xFF
    if part == ">":
        return value >> 8
    return value


def _format_hex(value: int, width: int, upper: bool) -> str:
    digits = f"{value:X}" if upper else f"{value:x}"
    if width < 0:
        return digits.ljust(-width)
    return digits.rjust(width, "0")


def _size_prefix(name: str, length: int) -> str:
    if name.endswith("/"):
        return ""
    return f"a{length}: " if name.endswith("_") else f"a{length}:"


def _line_end(text: str, start: int) -> int:
    match = _LINE_SEP.search(text, start)
    return match.end() if match else len(text)


def _identifier(text: str) -> str:
    return "".join(c if (c.isascii() and c.isalnum()) or c == "_" else "_" for c in text)


class _TemplateFiller:
    def __init__(self, symbols: SymbolTable, new_rom: bytes, orig_rom: bytes) -> None:
        self.symbols = symbols
        self.new_rom = bytes(new_rom)
        self.orig_rom = bytes(orig_rom)
        self.hook: Symbol | None = None
        # The ROM checksum will always differ
        self.patches = [Patch(CHECKSUM_PATCH_OFFSET, CHECKSUM_PATCH_SIZE)]
        # The Stadium data will always differ
        if len(self.orig_rom) == ROM_SIZE:
            self.patches.append(Patch(ROM_SIZE - STADIUM_SIZE, STADIUM_SIZE))

    @property
    def hook_name(self) -> str | None:
        return self.hook.name if self.hook else None

    def fill(self, template: str) -> str:
        out: list[str] = []
        pos = 0
        end = len(template)
        while pos < end:
            c = template[pos]
            if c == ";":
                stop = _line_end(template, pos + 1)
                out.append(template[pos:stop])
                pos = stop
            elif c == "{":
                close = template.find("}", pos + 1)
                stop = end if close < 0 else close
                out.append(self.interpret(template[pos + 1 : stop]))
                pos = stop + 1
            elif c == "[":
                pos = self._label(template, pos, out)
            else:
                match = _TEMPLATE_SPECIAL.search(template, pos)
                stop = match.start() if match else end
                out.append(template[pos:stop])
                pos = stop
        return "".join(out)

    def _label(self, template: str, pos: int, out: list[str]) -> int:
        close = template.find("]", pos + 1)
        label = template[pos + 1 :] if close < 0 else template[pos + 1 : close]
        visible, at, alternate = label.partition("@")
        out.append("[" + visible + ("]" if close >= 0 else ""))
        name = alternate if at else _identifier(visible)
        # The current patch should have a corresponding ".VC_" label
        self.hook = self.symbols.find(".VC_" + name)
        if close < 0:
            return len(template)
        stop = _line_end(template, close + 1)
        out.append(template[close + 1 : stop])
        return stop

    def interpret(self, text: str) -> str:
        name, *args = _SPACE_RUN.split(text.strip(_C_SPACE))
        if name in _PATCH_COMMANDS:
            return self._patch(name, args)
        if name in _DWS_COMMANDS:
            return self._dws(name, args)
        if name in _DB_COMMANDS:
            return self._db(name, args)
        if name.rstrip("~") in _HEX_STEMS and name.count("~") <= 1:
            return self._hex(name, args)
        raise ToolError(f'Error: Unknown command: "{name}"')

    @staticmethod
    def _invalid_args(name: str) -> ToolError:
        return ToolError(f'Error: Invalid arguments for command: "{name}"')

    def _patch(self, name: str, args: list[str]) -> str:
        if len(args) > 2:
            raise self._invalid_args(name)
        hook = self.hook
        if hook is None:
            raise ToolError(f'Error: No current patch for command: "{name}"')
        offset = hook.offset + (parse_number(args[0], 0) if args else 0)
        for rom, label in ((self.orig_rom, "original"), (self.new_rom, "new")):
            if offset > len(rom):
                raise ToolError(f'Error: Cannot seek to "vc_patch {hook.name}" in the {label} ROM')
        if len(args) == 2:
            length = parse_number(args[1], 0)
        else:
            length = self.symbols.find(hook.name + "_End").offset - offset
        if length < 0:
            raise ToolError(f'Error: Invalid length for "vc_patch {hook.name}": {length}')
        new = self.new_rom[offset : offset + length]
        orig = self.orig_rom[offset : offset + length]
        if len(new) < length or len(orig) < length:
            raise ToolError(f'Error: "vc_patch {hook.name}" runs past the end of the ROM')
        self.patches.append(Patch(offset, length))
        spec = "02X" if name[0].isupper() else "02x"
        if length == 1:
            text = f"0x{new[0]:{spec}}"
        else:
            text = _size_prefix(name, length) + " ".join(f"{b:{spec}}" for b in new)
        if new == orig:
            print(
                f'{PROGRAM}: Warning: "vc_patch {hook.name}" doesn\'t alter the ROM',
                file=sys.stderr,
            )
        return text

    def _dws(self, name: str, args: list[str]) -> str:
        if not args:
            raise self._invalid_args(name)
        spec = "02X" if name[0].isupper() else "02x"
        words = []
        for arg in args:
            value = parse_arg_value(arg, False, self.symbols, self.hook_name)
            if value > 0xFFFF:
                raise ToolError(f'Error: Invalid value for "{name}" argument: 0x{value:x}')
            words.append(f"{value & 0xFF:{spec}} {value >> 8:{spec}}")
        return _size_prefix(name, len(args) * 2) + " ".join(words)

    def _db(self, name: str, args: list[str]) -> str:
        if len(args) != 1:
            raise self._invalid_args(name)
        value = parse_arg_value(args[0], False, self.symbols, self.hook_name)
        if value > 0xFF:
            raise ToolError(f'Error: Invalid value for "{name}" argument: 0x{value:x}')
        spec = "02X" if name[0].isupper() else "02x"
        return _size_prefix(name, 1) + f"{value:{spec}}"

    def _hex(self, name: str, args: list[str]) -> str:
        if len(args) not in (1, 2):
            raise self._invalid_args(name)
        value = parse_arg_value(args[0], not name.endswith("~"), self.symbols, self.hook_name)
        padding = parse_number(args[1], 0) if len(args) > 1 else 2
        stem = name.rstrip("~")
        if stem == "HEx":
            return "0x" + _format_hex(value >> 8, padding - 2, True) + f"{value & 0xFF:02x}"
        if stem == "Hex":
            return "0x" + _format_hex(value >> 12, padding - 3, True) + f"{value & 0xFFF:03x}"
        if stem == "heX":
            return "0x" + _format_hex(value >> 8, padding - 2, False) + f"{value & 0xFF:02X}"
        if stem == "hEX":
            return "0x" + _format_hex(value >> 12, padding - 3, False) + f"{value & 0xFFF:03X}"
        return "0x" + _format_hex(value, padding, stem[0].isupper())


def process_template(
    template: str, symbols: SymbolTable, new_rom: bytes, orig_rom: bytes
) -> tuple[str, list[Patch]]:
    """Fill in a template; return the patch text and the spans it covers."""
    filler = _TemplateFiller(symbols, new_rom, orig_rom)
    text = filler.fill(template)
    return text, filler.patches


def verify_completeness(orig_rom: bytes, new_rom: bytes, patches: Iterable[Patch]) -> bool:
    """Check that every byte where the ROMs differ lies within a patch."""
    ordered = sorted(patches, key=lambda patch: patch.offset)
    end = min(len(orig_rom), len(new_rom))
    offset = 0
    index = 0
    while True:
        if offset >= end:
            return offset >= len(orig_rom) and offset >= len(new_rom)
        target = ordered[index].offset if index < len(ordered) else None
        if target == offset:
            # The byte at the patch offset and the patch size after it are skipped
            offset += ordered[index].size + 1
            index += 1
            continue
        stop = target if target is not None and offset < target < end else end
        if orig_rom[offset:stop] != new_rom[offset:stop]:
            diff = next(
                i for i in range(offset, stop) if orig_rom[i] != new_rom[i]
            )
            print(f"{PROGRAM}: Warning: Unpatched difference at offset: 0x{diff:x}", file=sys.stderr)
            print(f"    Original ROM value: 0x{orig_rom[diff]:02x}", file=sys.stderr)
            print(f"    Patched ROM value: 0x{new_rom[diff]:02x}", file=sys.stderr)
            if index < len(ordered):
                print(f"    Current patch offset: 0x{ordered[index].offset:06x}", file=sys.stderr)
            return False
        offset = stop


def _main(argv: list[str]) -> None:
    if len(argv) != 5:
        raise UsageError(1)
    sym_file, new_file, orig_file, template_file, patch_file = argv
    symbols = parse_symbols(_read_file(sym_file).decode("latin-1"))
    new_rom = _read_file(new_file)
    orig_rom = _read_file(orig_file)
    template = _read_file(template_file).decode("latin-1")
    text, patches = process_template(template, symbols, new_rom, orig_rom)
    _write_file(patch_file, text.encode("latin-1"))
    if not verify_completeness(orig_rom, new_rom, patches):
        print(
            f'{PROGRAM}: Warning: Not all ROM differences are defined by "{patch_file}"',
            file=sys.stderr,
        )


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())
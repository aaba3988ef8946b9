"""
Casio CZ SysEx opcode table.

Maps one-byte protocol opcodes to symbolic names and back. The table is built
once from a closed list of (symbol, opcode) pairs:

    SYSEX_START   0xF0   opens a frame or nested block
    SYSEX_END     0xF7   closes the innermost open block
    CZ_*          0x40-0x59   parameter ids (bend range, transpose, ...)

Forward lookup is total over 0-255: any byte without a declared symbol resolves
to UNKNOWN. Reverse lookup is strict and raises UnknownSymbol, because encoding
a wrong byte onto the wire is worse than failing.
"""

from typing import Dict, Iterable, Iterator, NamedTuple, Tuple

from czmanager.errors import UnknownSymbol

UNKNOWN = "UNKNOWN"

SYSEX_START = 0xF0
SYSEX_END = 0xF7

CZ_OPCODES: Tuple[Tuple[str, int], ...] = (
    ("SYSEX_START", SYSEX_START),
    ("SYSEX_END", SYSEX_END),
    ("CZ_BEND_RANGE", 0x40),
    ("CZ_TRANSPOSE", 0x41),
    ("CZ_TONE_MIX", 0x42),
    ("CZ_GLIDE_NOTE", 0x43),
    ("CZ_GLIDE_TIME", 0x44),
    ("CZ_MOD_WHEEL_DEPTH", 0x45),
    ("CZ_LEVEL", 0x46),
    ("CZ_GLIDE_STATE", 0x47),
    ("CZ_PORTAMENTO_SWEEP", 0x48),
    ("CZ_MODULATION_STATE", 0x49),
    ("CZ_MOD_AFTER_TOUCH_DEPTH", 0x4A),
    ("CZ_AMP_AFTER_TOUCH_RANGE", 0x4B),
    ("CZ_CARTRIDGE_STATE", 0x4C),
    ("CZ_ONE_MODE", 0x4D),
    ("CZ_CURSOR", 0x4E),
    ("CZ_PAGE", 0x4F),
    ("CZ_MULTI_CHANNEL_STATE", 0x50),
    ("CZ_NUMBER_OF_POLY", 0x51),
    ("CZ_TONE_2_PITCH", 0x52),
    ("CZ_SPLIT_POINT", 0x53),
    ("CZ_SUS_PEDAL_STATE", 0x54),
    ("CZ_OCTAVE_SHIFT", 0x55),
    ("CZ_CHORUS_STATE", 0x56),
    ("CZ_TIME_BREAK_1", 0x57),
    ("CZ_TIME_BREAK_2", 0x58),
    ("CZ_KEY_CODE_SWEEP", 0x59),
)


class Opcode(NamedTuple):
    """A raw opcode byte together with its resolved symbol."""

    value: int
    symbol: str

    @property
    def is_known(self) -> bool:
        return self.symbol != UNKNOWN

    def __str__(self) -> str:
        return f"{self.symbol} (0x{self.value:02x})"


class TagTable:
    """
    Bidirectional opcode <-> symbol mapping.

    Example:
        tags = TagTable.default()
        tags.symbol(0x4C)                  # 'CZ_CARTRIDGE_STATE'
        tags.symbol(0x13)                  # 'UNKNOWN'
        tags.opcode("CZ_CARTRIDGE_STATE")  # 0x4C
    """

    def __init__(self, by_opcode: Dict[int, str], by_symbol: Dict[str, int]):
        self._by_opcode = dict(by_opcode)
        self._by_symbol = dict(by_symbol)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, int]]) -> "TagTable":
        """
        Build a table from (symbol, opcode) pairs.

        Raises:
            ValueError: If an opcode is out of byte range, or a symbol or
                opcode is declared twice
        """
        by_opcode: Dict[int, str] = {}
        by_symbol: Dict[str, int] = {}

        for symbol, opcode in pairs:
            _check_byte(opcode)
            if symbol == UNKNOWN:
                raise ValueError(f"{UNKNOWN} is reserved for undeclared opcodes")
            if opcode in by_opcode:
                raise ValueError(
                    f"Opcode 0x{opcode:02x} declared twice "
                    f"({by_opcode[opcode]}, {symbol})"
                )
            if symbol in by_symbol:
                raise ValueError(f"Symbol {symbol} declared twice")
            by_opcode[opcode] = symbol
            by_symbol[symbol] = opcode

        return cls(by_opcode, by_symbol)

    @classmethod
    def default(cls) -> "TagTable":
        """Return the shared CZ opcode table."""
        return CZ_TAGS

    def symbol(self, opcode: int) -> str:
        """Resolve an opcode to its symbol, or UNKNOWN."""
        _check_byte(opcode)
        return self._by_opcode.get(opcode, UNKNOWN)

    def opcode(self, symbol: str) -> int:
        """
        Resolve a symbol back to its opcode.

        Raises:
            UnknownSymbol: If the symbol is not declared
        """
        try:
            return self._by_symbol[symbol]
        except KeyError:
            raise UnknownSymbol(symbol) from None

    def lookup(self, opcode: int) -> Opcode:
        return Opcode(opcode, self.symbol(opcode))

    def is_parameter(self, opcode: int) -> bool:
        """True for declared opcodes other than the frame markers."""
        return opcode in self._by_opcode and opcode not in (SYSEX_START, SYSEX_END)

    def __contains__(self, item) -> bool:
        if isinstance(item, str):
            return item in self._by_symbol
        return item in self._by_opcode

    def __iter__(self) -> Iterator[Opcode]:
        for opcode in sorted(self._by_opcode):
            yield Opcode(opcode, self._by_opcode[opcode])

    def __len__(self) -> int:
        return len(self._by_opcode)


def _check_byte(value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Opcode must be 0-255, got {value}")


CZ_TAGS = TagTable.from_pairs(CZ_OPCODES)

from typing import List, Optional, Tuple, TypedDict


class OpCode(TypedDict):
    pattern: str
    mask: int
    match: int
    opcode: str
    operands: str


def _entry(pattern: str, mnemonic: str, operands: str = "") -> OpCode:
    """Build a table entry from a pattern such as ``"8xy4"``; hex digits are fixed, letters are operands."""
    mask = 0
    match = 0
    for ch in pattern:
        mask <<= 4
        match <<= 4
        if ch in "0123456789ABCDEF":
            mask |= 0xF
            match |= int(ch, 16)
    return {"pattern": pattern, "mask": mask, "match": match, "opcode": mnemonic, "operands": operands}


list_OpCode: List[OpCode] = [
    _entry("00E0", "CLS"),
    _entry("00EE", "RET"),
    _entry("1nnn", "JP", "${nnn:03X}"),
    _entry("2nnn", "CALL", "${nnn:03X}"),
    _entry("3xkk", "SE", "V{x:X}, ${kk:02X}"),
    _entry("4xkk", "SNE", "V{x:X}, ${kk:02X}"),
    _entry("5xy0", "SE", "V{x:X}, V{y:X}"),
    _entry("6xkk", "LD", "V{x:X}, ${kk:02X}"),
    _entry("7xkk", "ADD", "V{x:X}, ${kk:02X}"),
    _entry("8xy0", "LD", "V{x:X}, V{y:X}"),
    _entry("8xy1", "OR", "V{x:X}, V{y:X}"),
    _entry("8xy2", "AND", "V{x:X}, V{y:X}"),
    _entry("8xy3", "XOR", "V{x:X}, V{y:X}"),
    _entry("8xy4", "ADD", "V{x:X}, V{y:X}"),
    _entry("8xy5", "SUB", "V{x:X}, V{y:X}"),
    _entry("8xy6", "SHR", "V{x:X}"),
    _entry("8xy7", "SUBN", "V{x:X}, V{y:X}"),
    _entry("8xyE", "SHL", "V{x:X}"),
    _entry("9xy0", "SNE", "V{x:X}, V{y:X}"),
    _entry("Annn", "LD", "I, ${nnn:03X}"),
    _entry("Bnnn", "JP", "V0, ${nnn:03X}"),
    _entry("Cxkk", "RND", "V{x:X}, ${kk:02X}"),
    _entry("Dxyn", "DRW", "V{x:X}, V{y:X}, {n}"),
    _entry("Ex9E", "SKP", "V{x:X}"),
    _entry("ExA1", "SKNP", "V{x:X}"),
    _entry("Fx07", "LD", "V{x:X}, DT"),
    _entry("Fx0A", "LD", "V{x:X}, K"),
    _entry("Fx15", "LD", "DT, V{x:X}"),
    _entry("Fx18", "LD", "ST, V{x:X}"),
    _entry("Fx1E", "ADD", "I, V{x:X}"),
    _entry("Fx29", "LD", "F, V{x:X}"),
    _entry("Fx33", "LD", "B, V{x:X}"),
    _entry("Fx55", "LD", "[I], V{x:X}"),
    _entry("Fx65", "LD", "V{x:X}, [I]"),
]


def split_nibbles(opcode: int) -> Tuple[int, int, int, int]:
    return (opcode >> 12) & 0xF, (opcode >> 8) & 0xF, (opcode >> 4) & 0xF, opcode & 0xF


class OpCodes:
    """CHIP-8 instruction table: lookup, mnemonics and disassembly."""

    @staticmethod
    def GetEntry(opcode: int) -> Optional[OpCode]:
        """
        Get the table entry matching an instruction word.

        Args:
            opcode: Instruction word (0x0000-0xFFFF)

        Returns:
            The matching entry, or None for an unmatched word

        Raises:
            ValueError: If opcode is out of valid range
        """
        if not (0 <= opcode <= 0xFFFF):
            raise ValueError(f"Invalid opcode: 0x{opcode:X} (must be 0x0000-0xFFFF)")
        for entry in list_OpCode:
            if opcode & entry["mask"] == entry["match"]:
                return entry
        return None

    @staticmethod
    def Disassemble(opcode: int) -> str:
        """
        Disassemble one instruction word.

        Examples:
            >>> OpCodes.Disassemble(0x6005)
            'LD V0, $05'
            >>> OpCodes.Disassemble(0xD125)
            'DRW V1, V2, 5'
            >>> OpCodes.Disassemble(0x5121)
            'DW $5121'
        """
        entry = OpCodes.GetEntry(opcode)
        if entry is None:
            return f"DW ${opcode:04X}"
        _, x, y, n = split_nibbles(opcode)
        operands = entry["operands"].format(x=x, y=y, n=n, kk=opcode & 0xFF, nnn=opcode & 0xFFF)
        return f"{entry['opcode']} {operands}" if operands else entry["opcode"]

    @staticmethod
    def DisassembleBytes(data: bytes, origin: int = 0x200) -> List[Tuple[int, int, str]]:
        """
        Disassemble a program image two bytes at a time.

        Returns:
            List of (address, word, text); a trailing odd byte is emitted as ``DB``.
        """
        results = []
        for offset in range(0, len(data) - 1, 2):
            word = (data[offset] << 8) | data[offset + 1]
            results.append((origin + offset, word, OpCodes.Disassemble(word)))
        if len(data) % 2:
            results.append((origin + len(data) - 1, data[-1], f"DB ${data[-1]:02X}"))
        return results

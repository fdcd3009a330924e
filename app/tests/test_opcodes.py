import pytest

from pychip8.util.OpCodes import OpCodes, list_OpCode, split_nibbles


def test_table_covers_every_instruction():
    assert len(list_OpCode) == 34
    assert len({entry["pattern"] for entry in list_OpCode}) == 34


@pytest.mark.parametrize(
    "opcode, text",
    [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1ABC, "JP $ABC"),
        (0x2300, "CALL $300"),
        (0x3A42, "SE VA, $42"),
        (0x5120, "SE V1, V2"),
        (0x8AB4, "ADD VA, VB"),
        (0x8AB6, "SHR VA"),
        (0x8ABE, "SHL VA"),
        (0xA123, "LD I, $123"),
        (0xB200, "JP V0, $200"),
        (0xD125, "DRW V1, V2, 5"),
        (0xE39E, "SKP V3"),
        (0xF20A, "LD V2, K"),
        (0xF533, "LD B, V5"),
        (0xFF55, "LD [I], VF"),
        (0xFF65, "LD VF, [I]"),
        (0x5121, "DW $5121"),
        (0x0123, "DW $0123"),
    ],
)
def test_disassemble(opcode, text):
    assert OpCodes.Disassemble(opcode) == text


def test_lookup_helpers():
    assert OpCodes.GetEntry(0x8014)["opcode"] == "ADD"
    assert OpCodes.GetEntry(0xE000) is None
    with pytest.raises(ValueError):
        OpCodes.GetEntry(0x10000)


def test_split_nibbles():
    assert split_nibbles(0xD125) == (0xD, 0x1, 0x2, 0x5)


def test_disassemble_bytes():
    listing = OpCodes.DisassembleBytes(bytes([0x60, 0x05, 0x12, 0x00, 0xFF]))
    assert listing == [
        (0x200, 0x6005, "LD V0, $05"),
        (0x202, 0x1200, "JP $200"),
        (0x204, 0xFF, "DB $FF"),
    ]

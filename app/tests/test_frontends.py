from io import StringIO

from rich.console import Console

from conftest import make_interpreter, words
from pychip8.__main__ import main
from pychip8.terminal import print_machine, render_framebuffer


def test_render_framebuffer_uses_half_blocks():
    chip8 = make_interpreter([0xA000, 0xD005])
    chip8.step().unwrap()
    chip8.step().unwrap()
    lines = render_framebuffer(chip8.display()).plain.split("\n")
    assert len(lines) == 16
    assert all(len(line) == 64 for line in lines)
    # Glyph "0": rows 0-1 are F0/90, rows 2-3 are 90/90, row 4 is F0.
    assert lines[0][:4] == "█▀▀█"
    assert lines[1][:4] == "█  █"
    assert lines[2][:4] == "▀▀▀▀"


def test_print_machine_shows_registers():
    chip8 = make_interpreter([0x6A42])
    chip8.step().unwrap()
    out = StringIO()
    print_machine(chip8, Console(file=out, width=120), title="demo")
    text = out.getvalue()
    assert "demo" in text
    assert "42" in text
    assert "PC $0202" in text


def test_cli_headless_run(tmp_path):
    rom = tmp_path / "loop.ch8"
    rom.write_bytes(words(0x6005, 0x6103, 0x8014, 0x1200))
    assert main([str(rom), "--headless", "--cycles", "8", "--config", str(tmp_path / "none.toml")]) == 0


def test_cli_reports_load_failure(tmp_path):
    rom = tmp_path / "empty.ch8"
    rom.write_bytes(b"")
    assert main([str(rom), "--headless", "--config", str(tmp_path / "none.toml")]) == 1


def test_cli_reports_machine_fault(tmp_path):
    rom = tmp_path / "ret.ch8"
    rom.write_bytes(words(0x00EE))
    assert main([str(rom), "--headless", "--config", str(tmp_path / "none.toml")]) == 2

"""Test the command line driver."""
import pytest
from combat.cli import main


FIRST_EXAMPLE = "#######\n#.G...#\n#...EG#\n#.#.#G#\n#..G#E#\n#.....#\n#######\n"


@pytest.fixture
def map_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(FIRST_EXAMPLE, encoding="utf-8")
    return str(path)


def test_part1(map_file, capsys):
    assert main(["part1", map_file]) == 0
    out = capsys.readouterr().out
    assert "combat ended after 47 full rounds" in out
    assert "goblins win with 590 total hit points left" in out
    assert "outcome: 27730" in out


def test_part1_show_prints_final_map(map_file, capsys):
    assert main(["part1", map_file, "--show"]) == 0
    out = capsys.readouterr().out
    assert "#G....#   G(200)" in out


def test_part2(map_file, capsys):
    assert main(["part2", map_file]) == 0
    out = capsys.readouterr().out
    assert "elves need attack power 15" in out
    assert "outcome: 4988" in out


def test_part2_ceiling_too_low(map_file, capsys):
    assert main(["part2", map_file, "--ceiling", "10"]) == 1
    assert "no elf attack power up to 10" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main(["part1", str(tmp_path / "nope.txt")]) == 1
    assert "error:" in capsys.readouterr().err


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2

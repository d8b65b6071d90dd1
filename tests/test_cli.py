import re

import pytest

from hpccg.cli import main
from hpccg.generate import generate_matrix
from hpccg.solver import hpccg_residual

_RESIDUAL_LINE = re.compile(
    r"Difference between computed and exact \(residual\)  = (\S+)\.\n"
)


def _residual_text(out: str) -> str:
    match = _RESIDUAL_LINE.search(out)
    assert match is not None
    return match.group(1)


@pytest.mark.parametrize("args", [[], ["a", "b"], ["1", "2", "3", "4"]])
def test_wrong_argument_count_prints_usage(args, capsys):
    assert main(args) == 1
    err = capsys.readouterr().err
    assert "Usage:" in err
    assert "nx ny nz" in err


def test_generated_grid_matches_solver(capsys):
    assert main(["2", "3", "2"]) == 0
    out = capsys.readouterr().out
    system = generate_matrix(2, 3, 2)
    expected = hpccg_residual(
        system.matrix, system.b, system.x, system.xexact, 100, 0.0
    )
    assert _residual_text(out) == f"{expected.residual:.5g}"
    assert out.startswith("Initial Residual = ")


def test_generated_grid_prints_last_iteration(capsys):
    main(["3", "3", "3"])
    out = capsys.readouterr().out
    assert "Iteration = 99   Residual = " in out or "Iteration = " not in out.split(
        "Initial Residual"
    )[0]
    assert out.count("Initial Residual = ") == 1


def test_non_positive_grid_is_rejected(capsys):
    assert main(["0", "2", "2"]) == 1
    assert "Error" in capsys.readouterr().err


def test_non_numeric_dimension_is_rejected(capsys):
    assert main(["abc", "2", "2"]) == 1


def test_data_file_mode(tmp_path, capsys):
    data = tmp_path / "system.dat"
    data.write_text("1 1\n1\n1 2.0 0\n0.0 4.0 2.0\n")
    assert main([str(data)]) == 0
    out = capsys.readouterr().out
    assert f"Reading matrix info from {data}..." in out
    assert "Initial Residual = 4\n" in out
    assert _residual_text(out) == "0"


def test_missing_data_file(tmp_path, capsys):
    missing = tmp_path / "absent.dat"
    assert main([str(missing)]) == 1
    assert f"Error: Cannot open file: {missing}" in capsys.readouterr().out


def test_malformed_data_file(tmp_path, capsys):
    data = tmp_path / "bad.dat"
    data.write_text("2 2\n1\n")
    assert main([str(data)]) == 1
    assert "unexpected end of data" in capsys.readouterr().err
"""Command-line driver: build or read a linear system and solve it by CG."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Sequence

from hpccg.generate import generate_matrix
from hpccg.matrix import LinearSystem, dump_matlab_matrix
from hpccg.reader import read_hpc_row
from hpccg.solver import hpccg_residual

_PROG = "hpccg"
_MAX_ITER = 100
# Zero tolerance makes every run do max_iter iterations.
_TOLERANCE = 0.0
_DUMP_MATRIX = False
_MAX_DUMP_SIZE = 4

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _usage() -> str:
    return (
        "Usage:\n"
        f"Mode 1: {_PROG} nx ny nz\n"
        "     where nx, ny and nz are the local sub-block dimensions, or\n"
        f"Mode 2: {_PROG} HPC_data_file \n"
        "     where HPC_data_file is a globally accessible file containing matrix data."
    )


def _leading_int(text: str) -> int:
    """Parse the leading integer of ``text``, giving 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _load_system(args: Sequence[str]) -> LinearSystem:
    if len(args) == 3:
        nx, ny, nz = (_leading_int(a) for a in args)
        return generate_matrix(nx, ny, nz)
    return read_hpc_row(args[0])


def main(argv: Sequence[str] | None = None) -> int:
    """Run the solver on a generated grid (nx ny nz) or a data file."""
    args = list(sys.argv[1:] if argv is None else argv)
    size = 1
    rank = 0

    if len(args) not in (1, 3):
        print(_usage(), file=sys.stderr)
        return 1

    try:
        system = _load_system(args)
    except OSError:
        print(f"Error: Cannot open file: {Path(args[0])}")
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if _DUMP_MATRIX and size <= _MAX_DUMP_SIZE:
        dump_matlab_matrix(system.matrix, rank)

    result = hpccg_residual(
        system.matrix,
        system.b,
        system.x,
        system.xexact,
        max_iter=_MAX_ITER,
        tolerance=_TOLERANCE,
        log=print,
    )

    print(
        "Difference between computed and exact (residual)  = "
        f"{result.residual:.5g}.\n"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
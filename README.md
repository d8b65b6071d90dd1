# hpccg

A compact conjugate gradient benchmark. It builds (or reads) a sparse,
diagonally dominant linear system, solves it with an unpreconditioned
conjugate gradient iteration and reports how far the computed solution is
from the known exact one.

## Installing

    pip install .

For running the tests:

    pip install .[test]
    pytest

## Command line

Generate a 27-point stencil problem on an `nx` by `ny` by `nz` grid:

    hpccg 20 30 10

Or read a system from a data file in HPC row format:

    hpccg system.dat

Any other number of arguments prints a usage message and exits with
status 1, as does a file that cannot be opened or parsed.

The solver runs 100 iterations with a tolerance of zero. It prints the
initial residual norm, a progress line every tenth iteration and on the
last one, and finishes with the maximum absolute difference between the
computed and exact solutions.

## Data file format

Whitespace-separated numbers:

1. the number of rows and the total number of nonzeros;
2. the number of nonzeros in each row, one count per row;
3. for each row, its count again followed by that many `value column` pairs
   (columns are 0-based);
4. for each row, the initial guess, the right-hand side and the exact solution.

A count in step 3 that differs from the one given in step 2, a missing
field or a malformed number raises `ValueError`.

## Library use

    from hpccg.generate import generate_matrix
    from hpccg.solver import hpccg_residual

    system = generate_matrix(20, 30, 10)
    result = hpccg_residual(system.matrix, system.b, system.x, system.xexact, 100, 0.0)
    print(result.niters, result.normr, result.residual)

Modules:

- `hpccg.matrix`: `SparseMatrix` (per-row values and column indices, with
  `rows()` and `values_f32(row)`), `LinearSystem` (a matrix with `x`, `b`
  and `xexact`), and `dump_matlab_matrix(matrix, rank, directory)`, which
  writes the matrix as 1-based `row column value` triples to
  `mat<rank>.dat` for ranks 0 to 3.
- `hpccg.kernels`: `waxpby`, `ddot`, `sparsemv` and `compute_residual`,
  the vector and matrix kernels the solver is built from.
- `hpccg.generate`: `generate_matrix(nx, ny, nz, use_7pt_stencil=False)`
  builds the stencil problem, whose exact solution is all ones, starting
  from a zero guess.
- `hpccg.reader`: `read_hpc_row(path)` and `parse_hpc_row(text)` load a
  `LinearSystem` from the HPC row format.
- `hpccg.solver`: `hpccg` returns a `CGResult` with the solution, the
  iteration count, the final residual norm and the work vectors;
  `hpccg_residual` also fills in `residual`, the largest deviation from
  the exact solution. Neither modifies the `x` passed in; progress lines go
  to an optional `log` callable.
- `hpccg.mixed`: `mixed_precision_hpccg` runs the first iterations (60 by
  default) in double precision and the rest in single precision, for
  comparison with `high_precision_hpccg`. Both run a fixed number of
  iterations with no tolerance test.
- `hpccg.cli`: `main(argv=None)`, the `hpccg` command.

## What it does not do

Everything runs in a single process: there is no distribution of rows
across processes, and the rank argument of `dump_matlab_matrix` only
selects the output file name and row offset. The package does not estimate
or record floating-point rounding error of the solver; it only reports the
final deviation from the exact solution.
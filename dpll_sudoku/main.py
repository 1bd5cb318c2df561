#!/usr/bin/env python3
"""
Solve a Sudoku puzzle file or a DIMACS CNF file with the DPLL solver and
report the solution and the time it took.

Usage:
  python -m dpll_sudoku.main --puzzle samples/sudoku_easy.txt --dim 3
  python -m dpll_sudoku.main --cnf problem.cnf

Exit codes: 0 solved / SAT, 1 unsatisfiable, 2 bad input.
"""

import argparse
import sys
import time
from typing import List, Optional

from . import solver as solver_mod
from .dimacs import load_dimacs
from .encoder import Sudoku


def timed_solve(sudoku: Sudoku) -> Optional[Sudoku]:
  """Solve a puzzle, printing progress, the solution and the time taken."""
  started = time.perf_counter()

  print("Creating SAT formula...")
  formula = sudoku.problem()

  print("Solving...")
  env = solver_mod.solve(formula)

  solution: Optional[Sudoku] = None
  if env is None:
    print("This Sudoku puzzle is unsatisfiable.")
  else:
    print("Interpreting solution...")
    solution = sudoku.interpret_solution(env)
    print("Solution is: \n" + str(solution))

  elapsed_ms = (time.perf_counter() - started) * 1000
  print(f"Time: {elapsed_ms:.0f}ms")
  return solution


def timed_solve_cnf(path: str) -> bool:
  """Solve a DIMACS file, printing s/v lines in the usual competition format."""
  started = time.perf_counter()
  clauses, num_vars = load_dimacs(path)
  print(f"c {num_vars} variables, {len(clauses)} clauses")
  status, model = solver_mod.solve_cnf(clauses, num_vars)
  if status == "SAT":
    print("s SATISFIABLE")
    print("v " + " ".join(str(lit) for lit in (model or [])) + " 0")
  else:
    print("s UNSATISFIABLE")
  elapsed_ms = (time.perf_counter() - started) * 1000
  print(f"c time {elapsed_ms:.0f}ms")
  return status == "SAT"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
  ap = argparse.ArgumentParser(description="Solve Sudoku puzzles and CNF formulas with DPLL.")
  source = ap.add_mutually_exclusive_group(required=True)
  source.add_argument("--puzzle", help="Path to a puzzle file, one row per line")
  source.add_argument("--cnf", help="Path to a DIMACS CNF file")
  ap.add_argument("--dim", type=int, default=None, help="Box size (2 for 4x4, 3 for 9x9); inferred when omitted")
  return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
  args = parse_args(argv)
  try:
    if args.cnf:
      return 0 if timed_solve_cnf(args.cnf) else 1
    with open(args.puzzle, "r") as f:
      sudoku = Sudoku.from_string(f.read(), args.dim)
    return 0 if timed_solve(sudoku) is not None else 1
  except (OSError, ValueError) as e:
    print(f"Error: {e}", file=sys.stderr)
    return 2


if __name__ == "__main__":
  sys.exit(main())

"""DPLL SAT solving over immutable CNF formulas, with a Sudoku encoder on top."""

from .clause import Clause
from .encoder import ParseError, Sudoku, cell_variable, encode
from .environment import Bool, Environment
from .formula import Formula
from .literal import Literal, Variable, negate, negative, positive
from .solver import solve, solve_cnf

__all__ = [
  "Bool",
  "Clause",
  "Environment",
  "Formula",
  "Literal",
  "ParseError",
  "Sudoku",
  "Variable",
  "cell_variable",
  "encode",
  "negate",
  "negative",
  "positive",
  "solve",
  "solve_cnf",
]

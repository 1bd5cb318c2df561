"""
Sudoku Encoder (Puzzle -> Formula) and Interpreter (Environment -> Puzzle)

Variables are named after the cell they describe:
    occupies(r,c,k) is True iff digit k sits in row r, column c
where r, c, k are all in 1..N for an N x N grid (N = dim * dim).

Encoded constraints:
  (1) Exactly one digit per cell
  (2) For each digit k and each row r: exactly one column c has k
  (3) For each digit k and each column c: exactly one row r has k
  (4) For each digit k and each dim x dim box: exactly one cell has k
  (5) Clues: unit clauses for the given digits
"""

import math
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .clause import Clause
from .environment import Bool, Environment
from .formula import Formula
from .literal import Variable, negative, positive

Clue = Tuple[int, int, int]


class ParseError(ValueError):
  """Raised for malformed puzzle files and uninterpretable solutions."""


def cell_variable(row: int, column: int, digit: int) -> Variable:
  """The variable for "digit occupies (row, column)", 1-based."""
  return Variable.of(f"occupies({row},{column},{digit})")


def exactly_one(variables: Sequence[Variable]) -> List[Clause]:
  """Return CNF clauses encoding exactly one of the variables is true.

  Uses: at-least-one (single clause of all vars) + at-most-one (pairwise negatives).
  """
  clauses: List[Clause] = [Clause.of(*(positive(v) for v in variables))]
  for i in range(len(variables)):
    for j in range(i + 1, len(variables)):
      clauses.append(Clause.of(negative(variables[i]), negative(variables[j])))
  return clauses


def encode(dim: int, clues: Iterable[Clue]) -> Formula:
  """Formula for a (dim*dim) x (dim*dim) Sudoku with the given (row, column, digit) clues.

  Several clues may name the same cell; conflicting ones make the formula
  unsatisfiable rather than raising.
  """
  if dim < 1:
    raise ValueError(f"dim must be positive; got {dim}")
  grid_size = dim * dim
  digits = range(1, grid_size + 1)
  clauses: List[Clause] = []

  # 5) Clues, first so unit propagation finds them early
  for row, column, digit in clues:
    for value, name in ((row, "row"), (column, "column"), (digit, "digit")):
      if not (1 <= value <= grid_size):
        raise ValueError(f"Clue {name} {value} outside 1..{grid_size}")
    clauses.append(Clause.singleton(positive(cell_variable(row, column, digit))))

  # 1) Exactly one digit per cell
  for row in digits:
    for column in digits:
      clauses.extend(exactly_one([cell_variable(row, column, digit) for digit in digits]))

  # 2) Row constraint
  for row in digits:
    for digit in digits:
      clauses.extend(exactly_one([cell_variable(row, column, digit) for column in digits]))

  # 3) Column constraint
  for column in digits:
    for digit in digits:
      clauses.extend(exactly_one([cell_variable(row, column, digit) for row in digits]))

  # 4) Box constraint
  for box_row in range(1, grid_size + 1, dim):
    for box_column in range(1, grid_size + 1, dim):
      cells = [(box_row + dr, box_column + dc) for dr in range(dim) for dc in range(dim)]
      for digit in digits:
        clauses.extend(exactly_one([cell_variable(row, column, digit) for (row, column) in cells]))

  return Formula.of(*clauses)


_BLANKS = (".", "0", "_")


def _char_to_digit(char: str) -> int:
  if char in _BLANKS:
    return 0
  if "1" <= char <= "9":
    return int(char)
  if char.isascii() and "A" <= char.upper() <= "Z":
    return ord(char.upper()) - ord("A") + 10
  raise ParseError(f"Invalid character {char!r}")


def _digit_to_char(digit: int) -> str:
  if digit == 0:
    return "."
  if digit <= 9:
    return str(digit)
  return chr(ord("A") + digit - 10)


def parse_puzzle(text: str, dim: Optional[int] = None) -> List[List[int]]:
  """Parse a puzzle, one row per line.

  Rows are either compact ("..1.", digits 1-9 then A-Z, '.'/'0'/'_' blank)
  or whitespace separated integers with 0 for blank. Without dim the grid
  size is taken from the number of rows.
  """
  grid: List[List[int]] = []
  for line_no, line in enumerate(text.splitlines(), start=1):
    line = line.strip()
    if not line:
      continue
    try:
      if len(line.split()) > 1:
        row = [int(x) for x in line.split()]
      else:
        row = [_char_to_digit(ch) for ch in line]
    except ValueError as e:
      raise ParseError(f"Line {line_no}: {e}") from None
    grid.append(row)
  if not grid:
    raise ParseError("Empty puzzle")

  n = len(grid)
  if dim is None:
    dim = _isqrt_exact(n)
  if n != dim * dim:
    raise ParseError(f"Expected {dim * dim} rows for dim={dim}, got {n}")
  for r, row in enumerate(grid, start=1):
    if len(row) != n:
      raise ParseError(f"Row {r} has length {len(row)}, expected {n}")
    for c, v in enumerate(row, start=1):
      if v < 0 or v > n:
        raise ParseError(f"Cell ({r},{c}) has value {v} outside allowed range 0..{n}")
  return grid


def _isqrt_exact(n: int) -> int:
  dim = int(math.isqrt(n))
  if dim * dim != n:
    raise ParseError(f"N must be a perfect square; got N={n}")
  return dim


class Sudoku:
  """An immutable, possibly partially filled Sudoku grid.

  square[r][c] (0-based lists) holds the digit in row r+1, column c+1, or 0
  for a blank.
  """

  def __init__(self, dim: int, square: Optional[Sequence[Sequence[int]]] = None) -> None:
    if dim < 1:
      raise ValueError(f"dim must be positive; got {dim}")
    self.dim = dim
    self.size = dim * dim
    if square is None:
      square = [[0] * self.size for _ in range(self.size)]
    if len(square) != self.size:
      raise ValueError(f"Puzzle must be {self.size} x {self.size}, got {len(square)} rows")
    for r, row in enumerate(square, start=1):
      if len(row) != self.size:
        raise ValueError(f"Row {r} has length {len(row)}, expected {self.size}")
      for c, v in enumerate(row, start=1):
        if v < 0 or v > self.size:
          raise ValueError(f"Cell ({r},{c}) has value {v} outside allowed range 0..{self.size}")
    self._square: Tuple[Tuple[int, ...], ...] = tuple(tuple(row) for row in square)

  @classmethod
  def from_file(cls, dim: int, path: str) -> "Sudoku":
    with open(path, "r") as f:
      return cls(dim, parse_puzzle(f.read(), dim))

  @classmethod
  def from_string(cls, text: str, dim: Optional[int] = None) -> "Sudoku":
    grid = parse_puzzle(text, dim)
    return cls(_isqrt_exact(len(grid)), grid)

  def get(self, row: int, column: int) -> int:
    """Digit at (row, column), 1-based; 0 when blank."""
    return self._square[row - 1][column - 1]

  def rows(self) -> List[List[int]]:
    return [list(row) for row in self._square]

  def clues(self) -> Iterator[Clue]:
    for r, row in enumerate(self._square, start=1):
      for c, v in enumerate(row, start=1):
        if v != 0:
          yield (r, c, v)

  def is_complete(self) -> bool:
    return all(v != 0 for row in self._square for v in row)

  def problem(self) -> Formula:
    """The SAT problem whose solutions are the completions of this grid."""
    return encode(self.dim, self.clues())

  def interpret_solution(self, env: Optional[Environment]) -> "Sudoku":
    """Read the filled grid out of a solution of self.problem().

    Variables the environment leaves unbound are simply not digits; a cell
    needs exactly one True variable.
    """
    if env is None:
      raise ParseError("Solution not found.")
    square = [[0] * self.size for _ in range(self.size)]
    for row in range(1, self.size + 1):
      for column in range(1, self.size + 1):
        for digit in range(1, self.size + 1):
          if env.get(cell_variable(row, column, digit)) is Bool.TRUE:
            if square[row - 1][column - 1] != 0:
              raise ParseError(f"Multiple values found at ({row}, {column}).")
            square[row - 1][column - 1] = digit
        if square[row - 1][column - 1] == 0:
          raise ParseError(f"Solution provided has empty value ({row}, {column})")
    return Sudoku(self.dim, square)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Sudoku):
      return NotImplemented
    return self.dim == other.dim and self._square == other._square

  def __hash__(self) -> int:
    return hash((self.dim, self._square))

  def __str__(self) -> str:
    return "".join("".join(_digit_to_char(v) for v in row) + "\n" for row in self._square)

  def __repr__(self) -> str:
    return f"Sudoku({self.dim}, {self.rows()!r})"

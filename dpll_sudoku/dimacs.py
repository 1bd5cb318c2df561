"""
DIMACS CNF files and integer clauses.

Variable k of a DIMACS file is the Variable named "k"; literal -k is its
negation. Comment lines (c ...) and the problem line (p cnf V C) are
understood; clauses may span lines and end at a 0. A line starting with %
ends the file.
"""

from typing import Iterable, List, Tuple

from .clause import Clause
from .environment import Bool, Environment
from .formula import Formula
from .literal import Literal, Variable


def int_variable(index: int) -> Variable:
  return Variable.of(str(index))


def int_literal(lit: int) -> Literal:
  if lit == 0:
    raise ValueError("0 is not a literal")
  return Literal(int_variable(abs(lit)), lit < 0)


def to_formula(clauses: Iterable[Iterable[int]]) -> Formula:
  return Formula.of(*(Clause.of(*(int_literal(l) for l in clause)) for clause in clauses))


def model_from_environment(env: Environment, num_vars: int) -> List[int]:
  """One literal per variable 1..num_vars; unbound variables count as False."""
  model: List[int] = []
  for index in range(1, num_vars + 1):
    value = env.get(int_variable(index))
    model.append(index if value is Bool.TRUE else -index)
  return model


def parse_dimacs(text: str) -> Tuple[List[List[int]], int]:
  """Parse DIMACS CNF text into (clauses, num_vars).

  num_vars is taken from the problem line when present, else the largest
  variable seen.
  """
  clauses: List[List[int]] = []
  current: List[int] = []
  declared_vars = None
  max_var = 0
  for line_no, line in enumerate(text.splitlines(), start=1):
    s = line.strip()
    if s.startswith("%"):
      # SATLIB trailer: "%" then a stray "0"
      break
    if not s or s.startswith("c"):
      continue
    if s.startswith("p"):
      parts = s.split()
      if len(parts) != 4 or parts[1] != "cnf":
        raise ValueError(f"Line {line_no}: malformed problem line {s!r}")
      try:
        declared_vars = int(parts[2])
      except ValueError:
        raise ValueError(f"Line {line_no}: malformed problem line {s!r}") from None
      continue
    for token in s.split():
      try:
        lit = int(token)
      except ValueError:
        raise ValueError(f"Line {line_no}: {token!r} is not an integer literal") from None
      if lit == 0:
        clauses.append(current)
        current = []
      else:
        max_var = max(max_var, abs(lit))
        current.append(lit)
  if current:
    clauses.append(current)
  num_vars = declared_vars if declared_vars is not None else max_var
  if max_var > num_vars:
    raise ValueError(f"Literal {max_var} exceeds the {num_vars} variables declared")
  return clauses, num_vars


def load_dimacs(path: str) -> Tuple[List[List[int]], int]:
  with open(path, "r", encoding="utf-8") as f:
    return parse_dimacs(f.read())


def write_dimacs(path: str, clauses: Iterable[Iterable[int]], num_vars: int) -> None:
  clauses = [list(c) for c in clauses]
  with open(path, "w", encoding="utf-8") as f:
    f.write(f"p cnf {num_vars} {len(clauses)}\n")
    for clause in clauses:
      f.write(" ".join(str(l) for l in clause) + " 0\n")

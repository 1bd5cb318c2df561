"""
DPLL solver (Formula -> Environment or None)

Implement: solve(formula) -> Environment for which formula is true, or None.

Notes:
- Backtracking search with unit propagation, branching on a literal of the
  smallest clause. See https://en.wikipedia.org/wiki/DPLL_algorithm
- The search is iterative: the alternative of every branch is pushed on an
  explicit stack instead of the call stack, so formulas with many hundreds of
  variables (9x9 Sudoku) stay well clear of the recursion limit.
- Unsatisfiable is an ordinary result (None), never an exception.
"""

from typing import Iterable, List, Optional, Tuple

from .clause import Clause
from .dimacs import model_from_environment, to_formula
from .environment import Bool, Environment
from .formula import Formula
from .imlist import ImList
from .literal import Literal


def substitute(clauses: ImList[Clause], literal: Literal) -> ImList[Clause]:
  """Assign literal to True and simplify clauses accordingly.

  Satisfied clauses are dropped; everything else, shrunk or empty, is kept.
  """
  reduced: List[Clause] = []
  for clause in clauses:
    new_clause = clause.reduce(literal)
    if new_clause is not None:
      reduced.append(new_clause)
  return ImList.of(reduced)


def has_empty_clause(clauses: Iterable[Clause]) -> bool:
  return any(clause.is_empty() for clause in clauses)


def select_clause(clauses: Iterable[Clause]) -> Optional[Clause]:
  """Return the clause with the fewest literals, first one on ties.

  Stops at the first unit clause since nothing (non-empty) is smaller.
  """
  smallest: Optional[Clause] = None
  for clause in clauses:
    if smallest is None or clause.size() < smallest.size():
      smallest = clause
      if smallest.is_unit():
        break
  return smallest


def bind(env: Environment, literal: Literal) -> Environment:
  """Extend env so that literal evaluates to True."""
  return env.put(literal.variable, Bool.TRUE if literal.is_positive else Bool.FALSE)


def solve(formula: Formula) -> Optional[Environment]:
  """Solve formula with DPLL.

  Returns an environment under which every clause of formula is True, or
  None if no such environment exists. Variables that the search never had to
  fix stay unbound; any value works for them.
  """
  return search(formula.get_clauses(), Environment())


def search(clauses: ImList[Clause], env: Environment) -> Optional[Environment]:
  """Search for an extension of env satisfying clauses."""
  # Each entry is a branch still to try: (clauses, env, literal to set True)
  pending: List[Tuple[ImList[Clause], Environment, Literal]] = []

  while True:
    if clauses.is_empty():
      return env
    if has_empty_clause(clauses):
      # Contradiction, backtrack to the most recent untried branch
      if not pending:
        return None
      clauses, env, literal = pending.pop()
    else:
      smallest = select_clause(clauses)
      literal = smallest.choose_literal()  # type: ignore[union-attr]
      if not smallest.is_unit():  # type: ignore[union-attr]
        # Try literal = True now, literal = False on backtrack
        pending.append((clauses, env, literal.negation()))
    env = bind(env, literal)
    clauses = substitute(clauses, literal)


def solve_cnf(clauses: Iterable[Iterable[int]], num_vars: int) -> Tuple[str, Optional[List[int]]]:
  """Solve integer clauses (DIMACS style, no trailing 0s).

  Returns ("SAT", model) where model lists one literal per variable 1..num_vars,
  or ("UNSAT", None). Variables left free by the search are reported False.
  """
  env = solve(to_formula(clauses))
  if env is None:
    return ("UNSAT", None)
  return ("SAT", model_from_environment(env, num_vars))

"""
Formula: a conjunction ("AND") of clauses, i.e. a boolean formula in CNF.

The clause list is allowed to contain duplicates since conjunction is
idempotent. A formula without clauses is vacuously true.

Every operation keeps the result in CNF:

  f & g   concatenates the clause lists
  f | g   distributes: one merged clause per pair (clause of f, clause of g)
  ~f      De Morgan: each clause becomes the AND of its negated literals,
          and those formulas are combined with |

For example ~((a | b) & c) => (~a & ~b) | ~c => (~a | ~c) & (~b | ~c).
Negation can grow exponentially.
"""

from typing import FrozenSet, Iterator, Optional, Tuple

from .clause import Clause
from .environment import Bool, Environment
from .imlist import ImList
from .literal import Variable, positive


class Formula:
  __slots__ = ("_clauses",)

  def __init__(self, clauses: Optional[ImList[Clause]] = None) -> None:
    self._clauses: ImList[Clause] = clauses if clauses is not None else ImList()

  @classmethod
  def of_variable(cls, var: Variable) -> "Formula":
    return cls.of_clause(Clause.singleton(positive(var)))

  @classmethod
  def of_clause(cls, clause: Clause) -> "Formula":
    return cls().add_clause(clause)

  @classmethod
  def of(cls, *clauses: Clause) -> "Formula":
    return cls(ImList.of(clauses))

  def add_clause(self, clause: Clause) -> "Formula":
    return Formula(self._clauses.add(clause))

  def get_clauses(self) -> ImList[Clause]:
    return self._clauses

  @property
  def clauses(self) -> Tuple[Clause, ...]:
    return tuple(self._clauses)

  def size(self) -> int:
    return self._clauses.size()

  def and_(self, other: "Formula") -> "Formula":
    """Conjunction. The clauses of other come first, followed by the shared clauses of self."""
    return Formula(self._clauses.concat(other._clauses))

  def or_(self, other: "Formula") -> "Formula":
    # true | g == true, and distributing over zero clauses gives zero clauses anyway
    if self._clauses.is_empty() or other._clauses.is_empty():
      return Formula()
    merged = [left.merge(right) for left in self._clauses for right in other._clauses]
    return Formula(ImList.of(merged))

  def not_(self) -> "Formula":
    if self._clauses.is_empty():
      # ~true == false
      return Formula.of_clause(Clause())
    result: Optional[Formula] = None
    for clause in self._clauses:
      negated = Formula()
      for lit in clause:
        negated = negated.add_clause(Clause.singleton(lit.negation()))
      result = negated if result is None else result.or_(negated)
    return result  # type: ignore[return-value]

  __and__ = and_
  __or__ = or_
  __invert__ = not_

  def variables(self) -> FrozenSet[Variable]:
    return frozenset(lit.variable for clause in self._clauses for lit in clause)

  def evaluate(self, env: Environment) -> Bool:
    """TRUE if every clause is true under env, FALSE if one is false, else UNDEFINED."""
    result = Bool.TRUE
    for clause in self._clauses:
      value = clause.evaluate(env)
      if value is Bool.FALSE:
        return Bool.FALSE
      if value is Bool.UNDEFINED:
        result = Bool.UNDEFINED
    return result

  def __iter__(self) -> Iterator[Clause]:
    return iter(self._clauses)

  def __len__(self) -> int:
    return self._clauses.size()

  def __str__(self) -> str:
    return "Problem[" + "".join("\n" + repr(c) for c in self._clauses) + "]"

  __repr__ = __str__

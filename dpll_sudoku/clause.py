"""
Clause: a disjunction ("OR") of literals.

The empty clause is false and the unit clause forces its only literal. Clauses
are immutable; `add` and `reduce` build new clauses that share the literal
list of the receiver wherever they can.
"""

from typing import FrozenSet, Iterator, Optional

from .environment import Bool, Environment
from .imlist import ImList
from .literal import Literal


class Clause:
  __slots__ = ("_literals", "_members")

  def __init__(self, literals: Optional[ImList[Literal]] = None) -> None:
    if literals is None:
      literals = ImList()
    # Same literals as a set, for constant time membership in reduce()
    self._members: FrozenSet[Literal] = frozenset(literals)
    if len(self._members) != literals.size():
      # Repeated literals: keep the first occurrence of each
      literals = ImList.of(dict.fromkeys(literals))
    self._literals: ImList[Literal] = literals

  @classmethod
  def singleton(cls, literal: Literal) -> "Clause":
    return cls().add(literal)

  @classmethod
  def of(cls, *literals: Literal) -> "Clause":
    """Clause of the given literals, iterated in the order given."""
    clause = cls()
    for literal in reversed(literals):
      clause = clause.add(literal)
    return clause

  def add(self, literal: Literal) -> "Clause":
    """Return a new clause with literal or-ed in (a literal already present is not repeated)."""
    if literal is None:
      raise ValueError("Clause.add(None)")
    if literal in self._members:
      return self
    return Clause(self._literals.add(literal))

  def is_empty(self) -> bool:
    return self._literals.is_empty()

  def is_unit(self) -> bool:
    return self._literals.size() == 1

  def size(self) -> int:
    return self._literals.size()

  def contains(self, literal: Literal) -> bool:
    return literal in self._members

  def is_tautology(self) -> bool:
    return any(lit.negation() in self._members for lit in self._literals)

  def choose_literal(self) -> Literal:
    if self.is_empty():
      raise ValueError("Cannot choose a literal from the empty clause")
    return self._literals.first()

  def literals(self) -> ImList[Literal]:
    return self._literals

  def reduce(self, literal: Literal) -> Optional["Clause"]:
    """Simplify this clause under the assignment "literal is true".

    Returns None when the clause is satisfied and must be dropped. Otherwise
    returns the clause without the negation of literal; that can be the empty
    (false) clause, which is a Clause and not None. When neither polarity
    occurs the clause itself is returned.
    """
    if literal in self._members:
      return None
    opposite = literal.negation()
    if opposite not in self._members:
      return self
    return Clause(self._literals.remove(opposite))

  def merge(self, other: "Clause") -> "Clause":
    """Disjunction of two clauses; literals they share appear once."""
    result = self
    for lit in other:
      result = result.add(lit)
    return result

  def evaluate(self, env: Environment) -> Bool:
    undecided = False
    for lit in self._literals:
      value = env.get(lit.variable)
      if value is Bool.UNDEFINED:
        undecided = True
      elif (value is Bool.TRUE) == lit.is_positive:
        return Bool.TRUE
    return Bool.UNDEFINED if undecided else Bool.FALSE

  def __iter__(self) -> Iterator[Literal]:
    return iter(self._literals)

  def __len__(self) -> int:
    return self._literals.size()

  def __contains__(self, literal: object) -> bool:
    return literal in self._members

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Clause):
      return NotImplemented
    return self._members == other._members

  def __hash__(self) -> int:
    return hash(self._members)

  def __repr__(self) -> str:
    return "Clause(" + " | ".join(str(lit) for lit in self._literals) + ")"

"""Boolean variables and the literals built from them."""

from dataclasses import dataclass
from typing import ClassVar, Dict, Union


@dataclass(frozen=True)
class Variable:
  name: str

  # name -> Variable, so the same name always yields the same object
  _interned: ClassVar[Dict[str, "Variable"]] = {}

  @classmethod
  def of(cls, name: str) -> "Variable":
    var = cls._interned.get(name)
    if var is None:
      var = cls._interned.setdefault(name, cls(name))
    return var

  def __str__(self) -> str:
    return self.name


@dataclass(frozen=True)
class Literal:
  """A variable or its negation. Polarity is a flag, not a subclass."""
  variable: Variable
  negated: bool = False

  @property
  def is_positive(self) -> bool:
    return not self.negated

  def negation(self) -> "Literal":
    return Literal(self.variable, not self.negated)

  def __str__(self) -> str:
    return ("~" if self.negated else "") + self.variable.name


VarLike = Union[Variable, str]


def _as_variable(var: VarLike) -> Variable:
  if isinstance(var, Variable):
    return var
  if isinstance(var, str):
    return Variable.of(var)
  raise ValueError(f"Expected a Variable or a name, got {var!r}")


def positive(var: VarLike) -> Literal:
  return Literal(_as_variable(var), False)


def negative(var: VarLike) -> Literal:
  return Literal(_as_variable(var), True)


def negate(literal: Literal) -> Literal:
  return literal.negation()


def variable(literal: Literal) -> Variable:
  return literal.variable

"""
Truth values and variable assignments.

An Environment is never changed in place: `put` hands back a new
environment, so a search branch can extend its own copy without the sibling
branch ever seeing those bindings.
"""

from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from .literal import Variable


class Bool(Enum):
  TRUE = "True"
  FALSE = "False"
  UNDEFINED = "Undefined"

  def negation(self) -> "Bool":
    if self is Bool.TRUE:
      return Bool.FALSE
    if self is Bool.FALSE:
      return Bool.TRUE
    return Bool.UNDEFINED

  def __str__(self) -> str:
    return self.value


class Environment:
  __slots__ = ("_bindings",)

  def __init__(self, bindings: Optional[Dict[Variable, Bool]] = None) -> None:
    self._bindings: Dict[Variable, Bool] = dict(bindings) if bindings else {}

  def put(self, var: Variable, value: Bool) -> "Environment":
    """Bind var to value in a new environment.

    Binding a variable to the opposite of its current value is a caller bug.
    """
    if value is Bool.UNDEFINED:
      raise ValueError(f"Cannot bind {var} to {value}")
    current = self._bindings.get(var, Bool.UNDEFINED)
    if current is value:
      return self
    if current is not Bool.UNDEFINED:
      raise ValueError(f"{var} is already bound to {current}, cannot rebind to {value}")
    bindings = dict(self._bindings)
    bindings[var] = value
    return Environment(bindings)

  def put_true(self, var: Variable) -> "Environment":
    return self.put(var, Bool.TRUE)

  def put_false(self, var: Variable) -> "Environment":
    return self.put(var, Bool.FALSE)

  def get(self, var: Variable) -> Bool:
    return self._bindings.get(var, Bool.UNDEFINED)

  def items(self) -> Iterator[Tuple[Variable, Bool]]:
    return iter(self._bindings.items())

  def __contains__(self, var: object) -> bool:
    return var in self._bindings

  def __iter__(self) -> Iterator[Variable]:
    return iter(self._bindings)

  def __len__(self) -> int:
    return len(self._bindings)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Environment):
      return NotImplemented
    return self._bindings == other._bindings

  __hash__ = None  # type: ignore[assignment]

  def __repr__(self) -> str:
    inner = ", ".join(f"{var}: {value}" for var, value in sorted(self._bindings.items(), key=lambda kv: kv[0].name))
    return "Environment{" + inner + "}"

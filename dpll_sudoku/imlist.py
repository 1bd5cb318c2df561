"""
Persistent singly linked list.

Every operation returns a new list and leaves the receiver untouched. `add`
puts the new element in front of the receiver, so the receiver becomes the
tail of the result and is shared rather than copied. Iteration yields the most
recently added element first.
"""

from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class ImList(Generic[T]):
  __slots__ = ("_first", "_rest", "_size")

  def __init__(self) -> None:
    self._first: Optional[T] = None
    self._rest: Optional["ImList[T]"] = None
    self._size = 0

  @classmethod
  def _cons(cls, first: T, rest: "ImList[T]") -> "ImList[T]":
    node = cls.__new__(cls)
    node._first = first
    node._rest = rest
    node._size = rest._size + 1
    return node

  @classmethod
  def of(cls, items: Iterable[T]) -> "ImList[T]":
    """Build a list whose iteration order matches `items`."""
    result: ImList[T] = cls()
    for item in reversed(list(items)):
      result = result.add(item)
    return result

  def add(self, item: T) -> "ImList[T]":
    if item is None:
      raise ValueError("ImList cannot hold None")
    return ImList._cons(item, self)

  def first(self) -> T:
    if self._size == 0:
      raise IndexError("first() of empty ImList")
    return self._first  # type: ignore[return-value]

  def rest(self) -> "ImList[T]":
    if self._size == 0:
      raise IndexError("rest() of empty ImList")
    return self._rest  # type: ignore[return-value]

  def is_empty(self) -> bool:
    return self._size == 0

  def size(self) -> int:
    return self._size

  def remove(self, item: T) -> "ImList[T]":
    """Drop the first occurrence of item; the part after it is shared."""
    prefix: List[T] = []
    node = self
    while node._size > 0:
      if node._first == item:
        result = node._rest
        for kept in reversed(prefix):
          result = result.add(kept)  # type: ignore[union-attr]
        return result  # type: ignore[return-value]
      prefix.append(node._first)  # type: ignore[arg-type]
      node = node._rest  # type: ignore[assignment]
    return self

  def concat(self, other: "ImList[T]") -> "ImList[T]":
    """Elements of other (in its order) followed by this list, which is shared."""
    result = self
    for item in reversed(list(other)):
      result = result.add(item)
    return result

  def __iter__(self) -> Iterator[T]:
    node = self
    while node._size > 0:
      yield node._first  # type: ignore[misc]
      node = node._rest  # type: ignore[assignment]

  def __len__(self) -> int:
    return self._size

  def __contains__(self, item: object) -> bool:
    return any(e == item for e in self)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, ImList):
      return NotImplemented
    return self._size == other._size and all(a == b for a, b in zip(self, other))

  def __hash__(self) -> int:
    return hash(tuple(self))

  def __repr__(self) -> str:
    return "[" + ", ".join(repr(e) for e in self) + "]"

"""Fixed-length array results produced by array parsing."""

from array import array
from collections.abc import Iterator, Sequence
from typing import Any, Generic, TypeVar, overload

T = TypeVar("T")


class FixedArray(Sequence, Generic[T]):
    """A decoded JSON array: ``length`` elements stored in ``items``.

    ``items`` is a contiguous ``array.array`` for numeric and boolean elements
    and a tuple otherwise. An empty array owns no buffer (``items is None``).
    ``stride`` is the size in bytes of one element slot.
    """

    __slots__ = ("length", "items", "stride")

    def __init__(self, items: "array | tuple | None" = None, stride: int = 0) -> None:
        if items is not None and len(items) == 0:
            items = None
        self.items = items
        self.length = 0 if items is None else len(items)
        self.stride = stride

    def __len__(self) -> int:
        return self.length

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        if isinstance(index, slice):
            return [] if self.items is None else list(self.items[index])
        if self.items is None:
            raise IndexError("FixedArray index out of range")
        return self.items[index]

    def __iter__(self) -> Iterator[T]:
        if self.items is None:
            return iter(())
        return iter(self.items)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FixedArray):
            return list(self) == list(other)
        if isinstance(other, Sequence) and not isinstance(other, (str, bytes)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FixedArray({list(self)!r})"

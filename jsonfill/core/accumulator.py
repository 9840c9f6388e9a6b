"""Transient storage for array elements while the array length is unknown."""

from array import array
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Self

from .arrays import FixedArray
from .sizes import TYPECODES, element_stride
from .types import TypeDescriptor

Release = Callable[[Any], None]


@dataclass(slots=True)
class _Node:
    value: Any
    release: Release | None


class Accumulator:
    """Ordered, append-only store that owns its elements.

    Elements stay owned until ``flatten()`` moves them into a FixedArray or
    ``release()`` hands each one to its release hook. Used as a context
    manager, leaving the block releases whatever is still owned.

    Example:
        with Accumulator() as items:
            items.append(value, release=hook)
            result = items.flatten(element_descriptor)
    """

    def __init__(self) -> None:
        self._nodes: list[_Node] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()

    def append(self, value: Any, release: Release | None = None) -> None:
        """Take ownership of a value, with an optional release hook."""
        self._nodes.append(_Node(value, release))

    def release(self) -> None:
        """Release every owned element, in arrival order."""
        nodes, self._nodes = self._nodes, []
        for node in nodes:
            if node.release is not None and node.value is not None:
                node.release(node.value)

    def flatten(self, element: TypeDescriptor) -> FixedArray:
        """Move the elements into a FixedArray, in arrival order.

        Args:
            element: Descriptor shared by every element; sets the stride and
                whether a contiguous typed buffer is used.

        Returns:
            The fixed array. The accumulator is empty afterwards.
        """
        stride = element_stride(element)
        if not self._nodes:
            return FixedArray(stride=stride)

        values = [node.value for node in self._nodes]
        typecode = TYPECODES.get(element.kind)
        items = array(typecode, values) if typecode else tuple(values)

        # Ownership moved to the result; nothing left to release
        self._nodes = []
        return FixedArray(items, stride)

# image_scout/sequence.py
"""
Growable ordered container with balanced recursive splitting.

:class:`SplittableSequence` owns a buffer of slots that doubles on overflow.
:meth:`SplittableSequence.splitter` hands out a :class:`SequenceSplitter`
over the stored range; splitters are what the fork-join crawler divides to
spread link work across the pool.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

__all__ = ["SplittableSequence", "SequenceSplitter", "SequenceIterator"]

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CAPACITY = 10


class SplittableSequence(Generic[T]):
    """Ordered, growable sequence of items."""

    __slots__ = ("_data", "_size")

    def __init__(self, items: Optional[Iterable[T]] = None, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError(f"Initial capacity {capacity} is negative.")
        self._data: List[Any] = []
        self._size = 0
        if capacity:
            self._ensure_capacity(capacity)
        if items is not None:
            self.extend(items)

    # ------------------------------------------------------------------ #
    # Storage                                                            #
    # ------------------------------------------------------------------ #

    @property
    def capacity(self) -> int:
        return len(self._data)

    def _ensure_capacity(self, min_capacity: int) -> None:
        capacity = len(self._data)
        if capacity >= min_capacity:
            return
        if capacity == 0:
            capacity = DEFAULT_CAPACITY
        while capacity < min_capacity:
            capacity *= 2
        self._data.extend([None] * (capacity - len(self._data)))

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self._size:
            raise IndexError(f"Index {index} not in sequence range [0, {self._size})")

    # ------------------------------------------------------------------ #
    # Mutation                                                           #
    # ------------------------------------------------------------------ #

    def append(self, item: T) -> None:
        self._ensure_capacity(self._size + 1)
        self._data[self._size] = item
        self._size += 1

    def extend(self, items: Iterable[T]) -> None:
        if isinstance(items, SplittableSequence):
            items = items.to_list()
        for item in items:
            self.append(item)

    def set(self, index: int, item: T) -> T:
        """Replaces the item at *index* and returns the previous one."""
        self._check_index(index)
        old = self._data[index]
        self._data[index] = item
        return old

    def remove_at(self, index: int) -> T:
        """Removes the item at *index*, shifting later items down by one."""
        self._check_index(index)
        old = self._data[index]
        self._data[index:self._size - 1] = self._data[index + 1:self._size]
        self._size -= 1
        self._data[self._size] = None
        return old

    def replace_all(self, operator: Callable[[T], T]) -> None:
        for i in range(self._size):
            self._data[i] = operator(self._data[i])

    # ------------------------------------------------------------------ #
    # Access                                                             #
    # ------------------------------------------------------------------ #

    def get(self, index: int) -> T:
        self._check_index(index)
        return self._data[index]

    def index_of(self, item: Any) -> int:
        for i in range(self._size):
            if self._data[i] == item:
                return i
        return -1

    def is_empty(self) -> bool:
        return self._size == 0

    def to_list(self) -> List[T]:
        return self._data[:self._size]

    def for_each(self, action: Callable[[T], Any]) -> None:
        for item in self:
            action(item)

    def splitter(self) -> "SequenceSplitter[T]":
        return SequenceSplitter(self, 0, self._size)

    # ------------------------------------------------------------------ #
    # Python protocol                                                    #
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __setitem__(self, index: int, item: T) -> None:
        self.set(index, item)

    def __iter__(self) -> "SequenceIterator[T]":
        return SequenceIterator(self)

    def __contains__(self, item: object) -> bool:
        return self.index_of(item) != -1

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SplittableSequence):
            return self.to_list() == other.to_list()
        return NotImplemented

    def __repr__(self) -> str:
        return f"SplittableSequence({self.to_list()!r})"


class SequenceIterator(Generic[T]):
    """Insertion-order iterator; :meth:`remove` drops the last returned item."""

    __slots__ = ("_sequence", "_current", "_last")

    def __init__(self, sequence: SplittableSequence[T]) -> None:
        self._sequence = sequence
        self._current = 0
        self._last = -1

    def __iter__(self) -> "SequenceIterator[T]":
        return self

    def __next__(self) -> T:
        if self._current >= len(self._sequence):
            raise StopIteration
        item = self._sequence.get(self._current)
        self._last = self._current
        self._current += 1
        return item

    def remove(self) -> None:
        if self._last == -1:
            raise RuntimeError("remove() called before next() or twice in a row")
        self._sequence.remove_at(self._last)
        self._current = self._last
        self._last = -1


class SequenceSplitter(Generic[T]):
    """Traverses and partitions the range ``[index, end)`` of a sequence.

    Splitting never copies items: both halves read from the same buffer, so the
    sequence must not be modified while splitters over it are alive.
    """

    __slots__ = ("_sequence", "_index", "_end")

    def __init__(self, sequence: SplittableSequence[T], origin: int, end: int) -> None:
        self._sequence = sequence
        self._index = origin
        self._end = end

    def estimate_size(self) -> int:
        return self._end - self._index

    def __len__(self) -> int:
        return self.estimate_size()

    def try_advance(self, action: Callable[[T], Any]) -> bool:
        """Feeds the next item to *action*; False once the range is consumed."""
        if self._index >= self._end:
            return False
        item = self._sequence.get(self._index)
        self._index += 1
        action(item)
        return True

    def for_each_remaining(self, action: Callable[[T], Any]) -> None:
        while self.try_advance(action):
            pass

    def split(self) -> Optional["SequenceSplitter[T]"]:
        """Hands the upper half ``[mid, end)`` to a new splitter and keeps ``[index, mid)``.

        Returns None when fewer than two items remain.
        """
        if self._end - self._index < 2:
            return None
        mid = self._index + (self._end - self._index) // 2
        upper = SequenceSplitter(self._sequence, mid, self._end)
        self._end = mid
        return upper

    def __iter__(self) -> Iterator[T]:
        while self._index < self._end:
            item = self._sequence.get(self._index)
            self._index += 1
            yield item

    def reduce(self, mapper: Callable[[T], R], combiner: Callable[[R, R], R], initial: R) -> R:
        """Maps every remaining item and folds the results left to right."""
        result = initial
        for item in self:
            result = combiner(result, mapper(item))
        return result

    def __repr__(self) -> str:
        return f"SequenceSplitter([{self._index}, {self._end}))"

"""
CircularBuffer holding the most recent readings of a live view.
O(1) insertion and random access; fixed capacity, oldest entries are overwritten.
"""
from typing import Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class CircularBuffer(Generic[T]):
    """
    Sliding window over the last `capacity` items.
    - O(1) insertion at the end
    - O(1) random access
    - Fixed capacity, overwrites oldest when full
    """

    __slots__ = ('capacity', 'buffer', 'write_index', 'count', '_mask')

    def __init__(self, capacity: int):
        """
        Initialize circular buffer.

        Args:
            capacity: Maximum number of items to keep
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.buffer: List[Optional[T]] = [None] * capacity
        self.write_index = 0  # Next position to write
        self.count = 0  # Number of valid entries (0 to capacity)
        # Precompute mask for power-of-2 capacities (faster modulo)
        self._mask = capacity - 1 if (capacity & (capacity - 1)) == 0 else None

    def _physical(self, index: int) -> int:
        if self._mask is not None:
            return (self.write_index - self.count + index) & self._mask
        return (self.write_index - self.count + index) % self.capacity

    def append(self, item: T) -> None:
        """Add an item to the buffer. O(1)."""
        self.buffer[self.write_index] = item
        if self._mask is not None:
            self.write_index = (self.write_index + 1) & self._mask
        else:
            self.write_index = (self.write_index + 1) % self.capacity
        if self.count < self.capacity:
            self.count += 1

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.append(item)

    def get(self, index: int) -> T:
        """
        Get item at logical index (0 = oldest, count-1 = newest).
        Negative indices count from the newest entry.
        """
        if index < 0:
            index += self.count
        if index < 0 or index >= self.count:
            raise IndexError(f"Index {index} out of range [0, {self.count})")
        return self.buffer[self._physical(index)]

    def get_all(self) -> List[T]:
        """Get all valid entries in chronological order."""
        return self.get_range(0, self.count)

    def get_range(self, start_index: int, end_index: int) -> List[T]:
        """Get entries from start_index to end_index (exclusive)."""
        if start_index < 0 or end_index > self.count or start_index > end_index:
            raise IndexError(f"Invalid range [{start_index}, {end_index}) for buffer of size {self.count}")
        return [self.buffer[self._physical(i)] for i in range(start_index, end_index)]

    def latest(self) -> Optional[T]:
        """Newest entry, or None when empty."""
        if self.count == 0:
            return None
        return self.get(self.count - 1)

    def size(self) -> int:
        """Get number of valid entries."""
        return self.count

    def __len__(self) -> int:
        return self.count

    def clear(self) -> None:
        """Clear all entries."""
        self.buffer = [None] * self.capacity
        self.write_index = 0
        self.count = 0

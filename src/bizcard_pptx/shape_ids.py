"""Shape identifier allocation for inserted pictures."""

import threading


class ShapeIdAllocator:
    """Thread-safe, monotonically increasing shape id counter.

    Ids only need to be unique, not ordered, across every record of a batch
    (and across concurrent batches sharing the default allocator).
    """

    def __init__(self, start: int = 1000):
        """Initialize the counter.

        Args:
            start: Last id considered taken; the first allocation is start + 1.
        """
        self._value = start
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def current(self) -> int:
        with self._lock:
            return self._value


# Process-wide default used when callers don't inject their own
default_allocator = ShapeIdAllocator()

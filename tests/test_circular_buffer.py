"""
Tests for CircularBuffer, the sliding window behind the live feed
"""
import pytest

from sensor_dashboard.core.models.circular_buffer import CircularBuffer
from conftest import make_reading


class TestCircularBuffer:
    """Test CircularBuffer basic operations"""

    def test_append_and_get(self) -> None:
        buffer = CircularBuffer(capacity=5)

        buffer.append("a")
        buffer.append("b")
        buffer.append("c")

        assert buffer.size() == 3
        assert buffer.get(0) == "a"
        assert buffer.get(2) == "c"
        assert buffer.get(-1) == "c"

    def test_circular_wrap_around(self) -> None:
        """Oldest entries are overwritten once full"""
        buffer = CircularBuffer(capacity=3)

        buffer.extend([1, 2, 3, 4, 5])

        assert buffer.size() == 3
        assert buffer.get_all() == [3, 4, 5]

    def test_wrap_around_non_power_of_two(self) -> None:
        buffer = CircularBuffer(capacity=60)

        buffer.extend(range(100))

        assert len(buffer) == 60
        assert buffer.get(0) == 40
        assert buffer.latest() == 99

    def test_get_range(self) -> None:
        buffer = CircularBuffer(capacity=5)
        buffer.extend(range(1, 6))

        assert buffer.get_range(1, 4) == [2, 3, 4]

    def test_invalid_index(self) -> None:
        buffer = CircularBuffer(capacity=4)
        buffer.append(1)

        with pytest.raises(IndexError):
            buffer.get(1)
        with pytest.raises(IndexError):
            buffer.get_range(0, 2)

    def test_latest_empty(self) -> None:
        assert CircularBuffer(capacity=2).latest() is None

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            CircularBuffer(capacity=0)

    def test_clear(self) -> None:
        buffer = CircularBuffer(capacity=5)
        buffer.extend([1, 2])

        buffer.clear()

        assert buffer.size() == 0
        assert buffer.get_all() == []


class TestReadingWindow:
    """The live window keeps the newest readings in order"""

    def test_keeps_newest_readings(self) -> None:
        window = CircularBuffer(capacity=60)
        readings = [make_reading(i) for i in range(75)]

        window.extend(readings)

        kept = window.get_all()
        assert len(kept) == 60
        assert kept[0].id == "reading-15"
        assert kept[-1].id == "reading-74"
        assert [r.timestamp for r in kept] == sorted(r.timestamp for r in kept)

"""
Unit tests for id generation and epoch-millisecond helpers.
"""

from datetime import datetime, timezone

from src.core.ids import ALPHABET, generate_id
from src.core.timeutils import days_ago_ms, now_ms, start_of_day_ms, start_of_month_ms, to_ms


class TestGenerateId:
    """Test generate_id function."""

    def test_default_length(self):
        assert len(generate_id()) == 10

    def test_alphabet(self):
        assert set(generate_id(64)) <= set(ALPHABET)

    def test_size_is_clamped(self):
        assert len(generate_id(1)) == 4
        assert len(generate_id(500)) == 64

    def test_ids_are_unique(self):
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestTimeUtils:
    """Test epoch-millisecond helpers."""

    NOW = datetime(2026, 3, 17, 15, 42, 10, 500000, tzinfo=timezone.utc)

    def test_to_ms(self):
        assert to_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000

    def test_now_ms_is_milliseconds(self):
        # Milliseconds since epoch have 13 digits until the year 2286
        assert len(str(now_ms())) == 13

    def test_start_of_day(self):
        assert start_of_day_ms(self.NOW) == to_ms(datetime(2026, 3, 17, tzinfo=timezone.utc))

    def test_days_ago(self):
        assert days_ago_ms(7, self.NOW) == to_ms(self.NOW) - 7 * 24 * 3600 * 1000

    def test_start_of_month(self):
        assert start_of_month_ms(self.NOW) == to_ms(datetime(2026, 3, 1, tzinfo=timezone.utc))

from datetime import datetime, timezone
import re

from app.core.booking_number import generate_booking_number


class TestGenerateBookingNumber:
    def test_formats_timestamp_with_microsecond_suffix(self) -> None:
        moment = datetime(2026, 3, 7, 9, 5, 4, 42, tzinfo=timezone.utc)

        assert generate_booking_number(moment) == "BK-20260307-090504-000042"

    def test_default_uses_current_time(self) -> None:
        number = generate_booking_number()

        assert re.fullmatch(r"BK-\d{8}-\d{6}-\d{6}", number)

    def test_distinct_instants_give_distinct_numbers(self) -> None:
        first = datetime(2026, 3, 7, 9, 5, 4, 1, tzinfo=timezone.utc)
        second = datetime(2026, 3, 7, 9, 5, 4, 2, tzinfo=timezone.utc)

        assert generate_booking_number(first) != generate_booking_number(second)

    def test_fits_column_width(self) -> None:
        assert len(generate_booking_number()) <= 32

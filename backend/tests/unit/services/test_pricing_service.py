"""Unit tests for booking price resolution."""

from decimal import Decimal
from types import SimpleNamespace
from typing import Any

import pytest

from app.core.enums import BookingType
from app.core.exceptions import InvalidBookingTypeException, PriceUnavailableException
from app.services.pricing_service import resolve_amount, to_money


def _prices(**overrides: Any) -> SimpleNamespace:
    data = {
        "price_per_session": Decimal("15.00"),
        "trial_price": Decimal("10.00"),
        "package_4_price": None,
        "package_8_price": None,
        "package_12_price": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestResolveAmount:
    def test_trial_uses_trial_price(self) -> None:
        assert resolve_amount(_prices(), BookingType.TRIAL) == Decimal("10.00")

    def test_trial_without_trial_price_is_unavailable(self) -> None:
        with pytest.raises(PriceUnavailableException) as exc_info:
            resolve_amount(_prices(trial_price=None), "trial")

        assert exc_info.value.code == "PRICE_UNAVAILABLE"
        assert exc_info.value.status_code == 400
        assert "Trial price not available" in exc_info.value.message

    def test_single_uses_per_session_price(self) -> None:
        assert resolve_amount(_prices(), "single") == Decimal("15.00")

    def test_package_falls_back_to_per_session_multiple(self) -> None:
        assert resolve_amount(_prices(), "package_4") == Decimal("60.00")
        assert resolve_amount(_prices(), "package_8") == Decimal("120.00")
        assert resolve_amount(_prices(), "package_12") == Decimal("180.00")

    def test_explicit_package_price_wins(self) -> None:
        prices = _prices(package_8_price=Decimal("100.00"))

        assert resolve_amount(prices, BookingType.PACKAGE_8) == Decimal("100.00")
        # Other bundles still fall back
        assert resolve_amount(prices, BookingType.PACKAGE_4) == Decimal("60.00")

    def test_zero_package_price_is_not_treated_as_missing(self) -> None:
        assert resolve_amount(_prices(package_4_price=Decimal("0")), "package_4") == Decimal(
            "0.00"
        )

    def test_unknown_type_is_invalid(self) -> None:
        with pytest.raises(InvalidBookingTypeException) as exc_info:
            resolve_amount(_prices(), "package_6")

        assert exc_info.value.code == "INVALID_BOOKING_TYPE"
        assert exc_info.value.details == {"booking_type": "package_6"}

    def test_is_deterministic(self) -> None:
        prices = _prices(price_per_session=Decimal("12.50"))

        results = {resolve_amount(prices, "package_12") for _ in range(5)}

        assert results == {Decimal("150.00")}

    def test_float_prices_keep_their_written_value(self) -> None:
        prices = _prices(price_per_session=0.1, trial_price=19.995)

        assert resolve_amount(prices, "package_4") == Decimal("0.40")
        assert resolve_amount(prices, "trial") == Decimal("20.00")


class TestToMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("15"), Decimal("15.00")),
            ("7.005", Decimal("7.01")),
            (3, Decimal("3.00")),
            (2.675, Decimal("2.68")),
        ],
    )
    def test_quantizes_to_cents(self, value: Any, expected: Decimal) -> None:
        result = to_money(value)

        assert result == expected
        assert result.as_tuple().exponent == -2

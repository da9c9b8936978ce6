"""Centralized pricing calculations for bookings."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Protocol, Union

from app.core.enums import BookingType
from app.core.exceptions import InvalidBookingTypeException, PriceUnavailableException

CENT = Decimal("0.01")

_PACKAGE_PRICE_FIELDS = {
    BookingType.PACKAGE_4: "package_4_price",
    BookingType.PACKAGE_8: "package_8_price",
    BookingType.PACKAGE_12: "package_12_price",
}


class PriceTable(Protocol):
    """The pricing columns of a service listing."""

    price_per_session: Any
    trial_price: Optional[Any]
    package_4_price: Optional[Any]
    package_8_price: Optional[Any]
    package_12_price: Optional[Any]


def to_money(value: Any) -> Decimal:
    """Coerce a numeric value to a two-decimal amount."""
    if isinstance(value, Decimal):
        amount = value
    else:
        # str() first so binary floats such as 0.1 keep their written value
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_amount(prices: PriceTable, booking_type: Union[BookingType, str]) -> Decimal:
    """
    Total amount for a booking of ``booking_type`` against a service's price table.

    - trial: the trial price, which must be set
    - single: the per-session price
    - package_N: the explicit package price when set, else per-session * N

    Pure: reads only ``prices`` and performs no I/O.

    Raises:
        InvalidBookingTypeException: booking_type is not a known type
        PriceUnavailableException: trial requested but no trial price is set
    """
    parsed = BookingType.parse(booking_type)
    if parsed is None:
        raise InvalidBookingTypeException(booking_type)

    if parsed is BookingType.TRIAL:
        if prices.trial_price is None:
            raise PriceUnavailableException(parsed.value)
        return to_money(prices.trial_price)

    per_session = to_money(prices.price_per_session)
    if parsed is BookingType.SINGLE:
        return per_session

    package_price = getattr(prices, _PACKAGE_PRICE_FIELDS[parsed])
    if package_price is not None:
        return to_money(package_price)
    return to_money(per_session * parsed.session_count)

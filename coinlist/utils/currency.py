"""Форматирование сумм в долларах США."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def format_to_dollars(value: str | float | int | Decimal) -> str:
    """Форматирует число в строку вида `$1,234.57` (две цифры после точки).

    Нечисловые строки дают `$NaN`, отрицательные суммы дают `-$1.50`.
    """

    try:
        amount = Decimal(value.strip() if isinstance(value, str) else str(value))
    except InvalidOperation:
        return "$NaN"
    if amount.is_nan():
        return "$NaN"
    if amount.is_infinite():
        return "-$∞" if amount < 0 else "$∞"
    amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


__all__ = ["format_to_dollars"]

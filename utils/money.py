from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal("0.01")

CURRENCY_SYMBOLS = {"USD": "$", "CAD": "$", "AUD": "$", "EUR": "€", "GBP": "£"}


def parse_money(value: str) -> Decimal:
    if value is None:
        raise ValueError("missing money value")

    normalized = value.strip()
    if not normalized:
        raise ValueError("empty money value")

    is_negative = normalized.startswith("(") and normalized.endswith(")")
    normalized = normalized.replace("$", "").replace(",", "")

    if is_negative:
        normalized = normalized[1:-1]

    try:
        amount = Decimal(normalized).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError("invalid money value") from exc

    return -amount if is_negative else amount


def to_money(value) -> Decimal:
    """Coerce a Decimal, int, float or money string to a cents-quantized Decimal.

    Floats go through ``str`` so DuckDB DOUBLE columns don't leak binary noise
    (0.1 + 0.2) into sums.
    """
    if isinstance(value, str):
        return parse_money(value)
    if value is None:
        raise ValueError("missing money value")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError("invalid money value") from exc


def format_money(amount, currency: str = "USD") -> str:
    """Format like ``$1,234.50`` / ``-$12.00``."""
    amount = to_money(amount)
    symbol = CURRENCY_SYMBOLS.get(currency)
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}"
    if symbol is None:
        return f"{sign}{body} {currency}"
    return f"{sign}{symbol}{body}"

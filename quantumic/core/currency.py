"""USD amount formatting shared by transcript notices and the dashboard."""


def format_currency(value: float | None) -> str:
    """USD with two decimals: 1234.5 -> "$1,234.50", -1 -> "-$1.00"."""
    value = value or 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"

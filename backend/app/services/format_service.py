def format_currency(amount: float, currency_symbol: str = "$") -> str:
    """Format an amount for display, e.g. 12.5 -> "$12.50" and -3 -> "-$3.00" """
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol}{abs(amount):.2f}"

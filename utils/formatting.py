def format_currency(amount: float, symbol: str = "$") -> str:
    """Format a float as currency string, e.g. '$1,234.56'."""
    return f"{symbol}{amount:,.2f}"


def format_amount(amount: float) -> str:
    """Plain number for CSV cells: whole numbers lose the trailing '.0'."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))

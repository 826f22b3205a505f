"""
Plain-text rendering of price results.
"""
from app.schemas import PriceResult


def format_price_explanation(result: PriceResult) -> str:
    """Render as '₹ X.X' (rupees, one decimal) for clients wanting plain text."""
    return f"₹ {result.price:.1f}"

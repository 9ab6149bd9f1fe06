"""Fixed retail prices for Matte Canvas sizes"""

from typing import Dict, Optional

from sizes import normalize_size_label

# Price per size label, in cents
CANVAS_PRICES: Dict[str, int] = {
    '6" x 6"': 2000,
    '10" x 10"': 2500,
    '12" x 12"': 3000,
    '14" x 14"': 3500,
    '16" x 16"': 4000,
    '20" x 20"': 5000,
}


def desired_size_table(prices: Optional[Dict[str, int]] = None) -> Dict[str, int]:
    """Price table keyed by normalized size label."""
    prices = CANVAS_PRICES if prices is None else prices
    return {normalize_size_label(label): cents for label, cents in prices.items()}


def price_for_size(label: str, table: Optional[Dict[str, int]] = None) -> Optional[int]:
    """Price in cents for a size label, or None when the size is not sold."""
    table = desired_size_table() if table is None else table
    return table.get(normalize_size_label(label))

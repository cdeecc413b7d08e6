"""Approximate traffic parsing for trending searches."""

import re
from typing import Optional

NON_NUMERIC = re.compile(r'[^0-9.]')

MILLION = 1_000_000
THOUSAND = 1_000


def parse_traffic(traffic: Optional[str]) -> float:
    """
    Convert a human readable traffic string into a number.

    "2M+" -> 2000000, "500K" -> 500000, "1,234" -> 1234.
    Missing, empty, "N/A" or malformed values give 0. "M" wins over "K"
    when both appear.
    """
    if not traffic or traffic == "N/A":
        return 0.0

    digits = NON_NUMERIC.sub('', traffic)
    try:
        base = float(digits)
    except ValueError:
        return 0.0

    if "M" in traffic:
        return base * MILLION
    if "K" in traffic:
        return base * THOUSAND
    return base

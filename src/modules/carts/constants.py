"""Cart constants."""

MAX_LINE_QUANTITY = 10_000

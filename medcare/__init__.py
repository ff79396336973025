"""Medical care booking API."""

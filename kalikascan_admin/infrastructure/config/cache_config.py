"""
Cache configuration.
"""

# Reverse geocode results are kept 30 days
GEOCODE_TTL = 30 * 24 * 60 * 60

# Key prefixes for the redis backend
KEY_PREFIXES = {
    "geocode": "geocode:",
}

# Coordinates are rounded to this many decimals to build a cache key
GEOCODE_KEY_PRECISION = 6

"""Geohash encoding and decoding.

A geohash is a base32 string naming a latitude/longitude cell. Each symbol
carries five bits of an interleaved stream produced by repeatedly bisecting the
longitude range (-180, 180) and the latitude range (-90, 90), longitude first.

Values lying exactly on a bisection midpoint are placed in the upper half on
both axes, so ``encode(0, 0, 1) == "s"``.

Coordinates are not range-checked: a latitude above 90 or a longitude below
-180 simply keeps choosing the same half and ends up in the edge cell.
"""

import logging
import math
import operator

logger = logging.getLogger(__name__)

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"  # Standard Base32 characters
_BASE32_MAP = {symbol: value for value, symbol in enumerate(BASE32)}

BITS_PER_SYMBOL = 5
LAT_RANGE = (-90.0, 90.0)
LON_RANGE = (-180.0, 180.0)


class GeohashError(ValueError):
    """Base class for geohash encoding and decoding errors."""


class InvalidSymbol(GeohashError):
    """A character is not part of the geohash alphabet."""

    def __init__(self, symbol: str, position: int | None = None):
        self.symbol = symbol
        self.position = position
        if position is None:
            message = f"Invalid geohash character {symbol!r}"
        else:
            message = f"Invalid geohash character {symbol!r} at position {position}"
        super().__init__(message)


class InvalidPrecision(GeohashError):
    """A precision is negative, not an integer, or otherwise unusable."""

    def __init__(self, precision, reason: str = "must be a non-negative integer"):
        self.precision = precision
        super().__init__(f"Precision {precision!r} {reason}")


def symbol_for(value: int) -> str:
    """Return the alphabet symbol for a 5-bit value."""
    return BASE32[value]


def value_for(symbol: str) -> int:
    """Return the 5-bit value of an alphabet symbol.

    Raises:
        InvalidSymbol: if ``symbol`` is not one of the 32 alphabet characters.
    """
    try:
        return _BASE32_MAP[symbol]
    except KeyError:
        raise InvalidSymbol(symbol) from None


def symbol_bits(value: int) -> list[int]:
    """Expand a 5-bit value into its bits, most significant first."""
    return [(value >> (BITS_PER_SYMBOL - 1 - i)) & 1 for i in range(BITS_PER_SYMBOL)]


def _check_precision(precision, minimum: int = 0) -> int:
    """Return precision as an int, rejecting bools, non-integers and small values."""
    try:
        if isinstance(precision, bool):
            raise TypeError(precision)
        value = operator.index(precision)
    except TypeError:
        logger.debug("Rejecting geohash precision %r", precision)
        raise InvalidPrecision(precision) from None

    if value < minimum:
        logger.debug("Rejecting geohash precision %r", precision)
        if minimum:
            raise InvalidPrecision(precision, f"must be at least {minimum}")
        raise InvalidPrecision(precision)
    return value


def _bisect(value: float, lo: float, hi: float) -> tuple[int, float, float]:
    """Pick the half of (lo, hi) holding value; ties go to the upper half."""
    mid = (lo + hi) / 2
    if value >= mid:
        return 1, mid, hi
    return 0, lo, mid


def _narrow(bit: int, lo: float, hi: float) -> tuple[float, float]:
    """Keep the upper half of (lo, hi) for a 1 bit, the lower half for a 0 bit."""
    mid = (lo + hi) / 2
    if bit:
        return mid, hi
    return lo, mid


def encode(latitude: float, longitude: float, precision: int = 12) -> str:
    """Encode a latitude and longitude into a geohash.

    Args:
        latitude: latitude in decimal degrees, nominally -90 to 90
        longitude: longitude in decimal degrees, nominally -180 to 180
        precision: number of symbols in the result; 0 gives an empty string

    Returns:
        geohash string of exactly ``precision`` characters

    Raises:
        InvalidPrecision: if ``precision`` is negative or not an integer
    """
    precision = _check_precision(precision)

    lat_lo, lat_hi = LAT_RANGE
    lon_lo, lon_hi = LON_RANGE

    # Interleave bits, longitude on even positions
    bits = []
    for i in range(precision * BITS_PER_SYMBOL):
        if i % 2 == 0:
            bit, lon_lo, lon_hi = _bisect(longitude, lon_lo, lon_hi)
        else:
            bit, lat_lo, lat_hi = _bisect(latitude, lat_lo, lat_hi)
        bits.append(bit)

    # Convert to base32
    result = []
    for i in range(0, len(bits), BITS_PER_SYMBOL):
        chunk = bits[i : i + BITS_PER_SYMBOL]
        value = sum(bit << (BITS_PER_SYMBOL - 1 - j) for j, bit in enumerate(chunk))
        result.append(symbol_for(value))

    return "".join(result)


def decode(geohash: str) -> tuple[float, float]:
    """Decode a geohash into the (latitude, longitude) centre of its cell.

    An empty geohash names the whole globe and decodes to ``(0.0, 0.0)``.

    Raises:
        InvalidSymbol: if any character is outside the geohash alphabet
    """
    lat_lo, lat_hi = LAT_RANGE
    lon_lo, lon_hi = LON_RANGE

    # The longitude/latitude alternation runs across symbol boundaries
    is_lon = True
    for position, symbol in enumerate(geohash):
        try:
            value = value_for(symbol)
        except InvalidSymbol:
            logger.debug("Rejecting geohash %r: bad symbol at %d", geohash, position)
            raise InvalidSymbol(symbol, position) from None

        for bit in symbol_bits(value):
            if is_lon:
                lon_lo, lon_hi = _narrow(bit, lon_lo, lon_hi)
            else:
                lat_lo, lat_hi = _narrow(bit, lat_lo, lat_hi)
            is_lon = not is_lon

    return (lat_lo + lat_hi) / 2, (lon_lo + lon_hi) / 2


def cell_size(precision: int) -> tuple[float, float]:
    """Calculate the size of a geohash cell for a given precision.

    Half of each value bounds the error of a decoded coordinate for up to 19
    symbols. Past that the cell is close to float spacing near the grid edges,
    so the bound only holds to within one ulp of the coordinate.

    Args:
        precision (int): precision/length of geohash

    Returns:
        (latitude_extent, longitude_extent) in degrees
    """
    precision = _check_precision(precision)

    lat_bits = precision * BITS_PER_SYMBOL // 2
    lon_bits = precision * BITS_PER_SYMBOL - lat_bits

    return math.ldexp(LAT_RANGE[1] - LAT_RANGE[0], -lat_bits), math.ldexp(
        LON_RANGE[1] - LON_RANGE[0], -lon_bits
    )


class Geohash:
    """Geohash codec bound to a fixed precision."""

    def __init__(self, precision: int = 5):
        """Initialize Geohash encoder/decoder with given precision."""
        self.precision = _check_precision(precision, minimum=1)

    def encode(self, lat: float, lon: float) -> str:
        """Encode a latitude and longitude into a geohash."""
        return encode(lat, lon, self.precision)

    def decode(self, geohash: str) -> tuple[float, float]:
        """Decode a geohash into a latitude and longitude."""
        return decode(geohash)

    def cell_size(self) -> tuple[float, float]:
        return cell_size(self.precision)


if __name__ == "__main__":
    encoded = encode(45.0, 120.0, 8)
    decoded = decode(encoded)

    print(f"Encoded: {encoded}")
    print(f"Decoded: {decoded}")

"""
Magnitude estimation for triaxial accelerometer readings.

Converts a raw (x, y, z) reading into the 8-bit magnitude sample stored by the
ring buffer, using integer shifts only (no square root).
"""

from typing import NamedTuple

MAGNITUDE_CLAMP = 0xFFFF  # Estimates are clamped to 16 bits before quantizing
QUANTIZE_SHIFT = 8  # 16-bit estimate -> 8-bit magnitude sample


class TriaxialSample(NamedTuple):
    """One raw accelerometer reading in sensor units."""
    x: int
    y: int
    z: int


def approx_l2_norm(x, y, z):
    """
    Approximate sqrt(x^2 + y^2 + z^2) as a + 15/16 b + 3/8 c with a >= b >= c.

    Args:
        x, y, z: Signed integer axis values

    Returns:
        int: Unclamped magnitude estimate
    """
    a, b, c = abs(x), abs(y), abs(z)

    # Sort so that a >= b >= c
    if a < b:
        a, b = b, a
    if b < c:
        b, c = c, b
    if a < b:
        a, b = b, a

    return a + ((15 * b) >> 4) + ((3 * c) >> 3)


def quantize_magnitude(magnitude):
    """Clamp an estimate to 16 bits and scale it down to 8 bits."""
    if magnitude > MAGNITUDE_CLAMP:
        magnitude = MAGNITUDE_CLAMP
    return magnitude >> QUANTIZE_SHIFT


def magnitude_sample(reading: TriaxialSample) -> int:
    """
    Convert a triaxial reading into a magnitude sample in [0, 255].

    Args:
        reading: Raw sensor reading (any (x, y, z) sequence works)

    Returns:
        Quantized magnitude
    """
    x, y, z = reading
    return quantize_magnitude(approx_l2_norm(x, y, z))

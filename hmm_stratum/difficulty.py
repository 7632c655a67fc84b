"""Network difficulty from a compact (`bits`) target."""

from __future__ import annotations

from fractions import Fraction

from .errors import InvalidCompactTarget


# Bitcoin-style target1 constant for SHA256 PoW difficulty calculations.
TARGET_1 = int("00000000FFFF0000000000000000000000000000000000000000000000000000", 16)
MAX_TARGET = (1 << 256) - 1


def _split_compact(bits: int) -> tuple[int, int]:
    # sign bit (0x00800000) is not part of the mantissa
    return (bits >> 24) & 0xFF, bits & 0x007FFFFF


def target_from_bits(bits: int) -> int:
    """Integer 256-bit target; small exponents shift mantissa bytes out."""
    exponent, mantissa = _split_compact(bits)
    shift = 8 * (exponent - 3)
    target = mantissa << shift if shift >= 0 else mantissa >> -shift
    return min(target, MAX_TARGET)


def network_difficulty_exact(bits: int) -> Fraction:
    """TARGET_1 / (mantissa * 256^(exponent - 3)) as an exact rational."""
    exponent, mantissa = _split_compact(bits)
    if mantissa == 0:
        raise InvalidCompactTarget(f"compact target {bits:08x} has a zero mantissa")

    if exponent >= 3:
        return Fraction(TARGET_1, target_from_bits(bits))
    # exponent < 3 keeps the fractional part the integer target would drop
    return Fraction(TARGET_1 * 256 ** (3 - exponent), mantissa)


def network_difficulty(bits: int) -> float:
    # Rounded once from the exact value; 2^208-scale intermediates never pass through a float.
    return float(network_difficulty_exact(bits))

"""Ladder interpolation using a monotone cubic Hermite curve.

Ladders map a size (acreage, frontage) to a value through tiered anchor
points. Between anchors the curve is shape-preserving: it passes through
every anchor and never overshoots, so a ladder with increasing values
interpolates to increasing values. Outside the anchors the boundary value
is returned unchanged.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from cama.valuation.numeric import to_number

if TYPE_CHECKING:
    from cama.valuation.models import LadderTier, WaterfrontLadderTier

Point = tuple[float, float]


def interpolate(points: Iterable[Point], target: float) -> float:
    """Interpolate ``target`` against (x, y) anchors in any order."""
    ordered = sorted(points, key=lambda point: point[0])
    if not ordered:
        return 0.0
    if len(ordered) == 1:
        return ordered[0][1]
    if target <= ordered[0][0]:
        return ordered[0][1]
    if target >= ordered[-1][0]:
        return ordered[-1][1]
    return monotone_cubic(ordered, target)


def monotone_cubic(points: Sequence[Point], target: float) -> float:
    """Evaluate the monotone cubic through sorted ``points`` at an interior ``target``."""
    xs = [x for x, _ in points]
    i = bisect_left(xs, target) - 1
    x0, y0 = points[i]
    x1, y1 = points[i + 1]
    dx = x1 - x0
    secant = (y1 - y0) / dx

    # Endpoint tangents take the single adjacent secant.
    m0 = _tangent(points, i, secant) if i > 0 else secant
    m1 = _tangent(points, i + 1, secant) if i + 1 < len(points) - 1 else secant

    t = (target - x0) / dx
    t2 = t * t
    t3 = t2 * t
    h00 = 2 * t3 - 3 * t2 + 1
    h10 = t3 - 2 * t2 + t
    h01 = -2 * t3 + 3 * t2
    h11 = t3 - t2
    return h00 * y0 + h10 * dx * m0 + h01 * y1 + h11 * dx * m1


def _slope(a: Point, b: Point) -> float:
    dx = b[0] - a[0]
    return (b[1] - a[1]) / dx if dx > 0 else 0.0


def _tangent(points: Sequence[Point], k: int, secant: float) -> float:
    """Tangent at interior anchor ``k``, bounded by 3x the bracketing secant."""
    before = _slope(points[k - 1], points[k])
    after = _slope(points[k], points[k + 1])
    if before * after <= 0:
        return 0.0
    tangent = (before + after) / 2
    ratio = tangent / secant
    if ratio > 3:
        tangent = 3 * secant
    elif ratio < 0:
        tangent = 0.0
    return tangent


def land_value(tiers: Iterable[LadderTier], acreage: float) -> float:
    """Total land value (not a per-acre rate) for ``acreage`` on a zone ladder."""
    return interpolate(((tier.acreage, tier.value) for tier in tiers), acreage)


def waterfront_factor(tiers: Iterable[WaterfrontLadderTier], frontage: float) -> float:
    """Frontage factor for ``frontage`` feet on a water body ladder."""
    return interpolate(((tier.frontage, tier.factor) for tier in tiers), frontage)


def is_valid_ladder(
    rows: Any, x_key: str = "acreage", y_key: str = "value"
) -> bool:
    """True when ``rows`` is a non-empty list of mappings with numeric x/y keys."""
    if not isinstance(rows, list) or not rows:
        return False
    for row in rows:
        if not isinstance(row, Mapping) or x_key not in row or y_key not in row:
            return False
        try:
            x = to_number(row[x_key], None, strict=True)
            y = to_number(row[y_key], None, strict=True)
        except ValueError:
            return False
        if x is None or y is None:
            return False
    return True

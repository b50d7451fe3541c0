"""
Great-circle distance between two WGS84 points.

The corridor spans roughly 2 000 km from Rotterdam to Santa Pola, so a
flat-earth approximation drifts well past the safety margin used by the
ranking engine.  Haversine on a spherical Earth stays within ~0.5 % of the
ellipsoidal distance, which is far below that margin.

Out-of-range coordinates are not validated here; the result is finite but
meaningless.
"""

import math

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the straight-line distance in **km** between two points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lng2 - lng1) / 2

    h = (
        math.sin(half_dphi) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    )
    # Float error can push h marginally above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))

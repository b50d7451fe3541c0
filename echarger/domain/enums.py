"""
Domain enumerations.

The tabular store holds these as loosely-typed strings that are edited by
hand.  Every enum therefore has an explicit unknown/other member, and value
lookup is lenient: case-insensitive, whitespace-tolerant, and anything
unrecognised (including ``None``) resolves to that member instead of
raising ``ValueError``.
"""

from __future__ import annotations

import enum


class _LenientEnum(str, enum.Enum):
    @classmethod
    def fallback(cls) -> "_LenientEnum":
        """Member returned for unrecognised values.  Every subclass overrides this."""
        raise NotImplementedError(f"{cls.__name__} defines no fallback member")

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return cls.fallback()

    @classmethod
    def parse_set(cls, raw: str | None) -> frozenset:
        """Parse a comma-separated list such as ``"food, wifi"``."""
        if not raw:
            return frozenset()
        return frozenset(cls(part) for part in raw.split(",") if part.strip())


class ConnectorType(_LenientEnum):
    CCS = "CCS"
    CHADEMO = "CHAdeMO"
    OTHER = "other"

    @classmethod
    def fallback(cls) -> "ConnectorType":
        return cls.OTHER


class HighwayProximity(_LenientEnum):
    AT_EXIT = "at_exit"
    NEAR_EXIT = "near_exit"
    TOWN = "town"
    UNKNOWN = "unknown"

    @classmethod
    def fallback(cls) -> "HighwayProximity":
        return cls.UNKNOWN


class OnRoute(_LenientEnum):
    YES = "yes"
    NEARBY = "nearby"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def fallback(cls) -> "OnRoute":
        return cls.UNKNOWN


# Tags admitted by the "on-route only" switch
ON_ROUTE_TAGS: frozenset[OnRoute] = frozenset({OnRoute.YES, OnRoute.NEARBY})


class Amenity(_LenientEnum):
    FOOD = "food"
    TOILETS = "toilets"
    COFFEE = "coffee"
    SHOP = "shop"
    SEATING = "seating"
    WIFI = "wifi"
    HOTEL = "hotel"
    OTHER = "other"

    @classmethod
    def fallback(cls) -> "Amenity":
        return cls.OTHER


class RouteSegment(_LenientEnum):
    """The nine corridor segments, north to south."""

    NL_BE = "NL-BE"
    BE_FR = "BE-FR"
    FR_PARIS = "FR-Paris"
    PARIS_ORLEANS = "Paris-Orleans"
    ORLEANS_CLERMONT = "Orleans-Clermont"
    CLERMONT_MILLAU = "Clermont-Millau"
    MILLAU_ES = "Millau-ES"
    ES_VALENCIA = "ES-Valencia"
    VALENCIA_SANTAPOLA = "Valencia-SantaPola"
    UNKNOWN = "unknown"

    @classmethod
    def fallback(cls) -> "RouteSegment":
        return cls.UNKNOWN


def join_set(members) -> str:
    """Inverse of ``parse_set``: stable comma-separated storage form."""
    return ",".join(sorted(m.value for m in members))

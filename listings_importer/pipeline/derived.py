"""Fields computed from already-resolved canonical values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from listings_importer.pipeline.coerce import to_number

LAND_MAX_STRUCTURE_SQFT = 200
LAND_MIN_LOT_SQFT = 5000
MANUFACTURED_MIN_SQFT = 400
MANUFACTURED_MAX_SQFT = 1500
MANUFACTURED_MAX_BEDROOMS = 3
MANUFACTURED_MAX_BATHROOMS = 2
MANUFACTURED_MIN_LOT_SQFT = 2500
APARTMENTS_MIN_BEDROOMS = 10
APARTMENTS_MIN_BATHROOMS = 8
MULTI_FAMILY_MIN_BEDROOMS = 5
MULTI_FAMILY_MIN_BATHROOMS = 4
CONDO_MAX_SQFT = 1200
CONDO_MAX_LOT_SQFT = 2000
TOWNHOUSE_MAX_SQFT = 2500
TOWNHOUSE_MAX_LOT_SQFT = 5000


@dataclass(frozen=True)
class PropertyFeatures:
    square_footage: float
    bedrooms: float
    bathrooms: float
    lot_size: float

    @classmethod
    def from_mapping(cls, features: Mapping[str, Any]) -> "PropertyFeatures":
        def _value(*keys: str) -> float:
            for key in keys:
                number = to_number(features.get(key))
                if number is not None:
                    return number
            return 0.0

        return cls(
            square_footage=_value("squareFootage", "square_footage", "hs_square_footage"),
            bedrooms=_value("bedrooms", "hs_bedrooms"),
            bathrooms=_value("bathrooms", "hs_bathrooms"),
            lot_size=_value("lotSize", "lot_size", "hs_lot_size"),
        )


@dataclass(frozen=True)
class PropertyTypeRule:
    name: str
    predicate: Callable[[PropertyFeatures], bool]
    result: str


# Evaluated top to bottom, first match wins. Ranges overlap on purpose.
PROPERTY_TYPE_RULES: tuple[PropertyTypeRule, ...] = (
    PropertyTypeRule(
        "land",
        lambda f: f.square_footage <= LAND_MAX_STRUCTURE_SQFT and f.lot_size > LAND_MIN_LOT_SQFT,
        "land",
    ),
    PropertyTypeRule(
        "manufactured",
        lambda f: MANUFACTURED_MIN_SQFT <= f.square_footage <= MANUFACTURED_MAX_SQFT
        and f.bedrooms <= MANUFACTURED_MAX_BEDROOMS
        and f.bathrooms <= MANUFACTURED_MAX_BATHROOMS
        and f.lot_size >= MANUFACTURED_MIN_LOT_SQFT,
        "manufactured",
    ),
    PropertyTypeRule(
        "apartments",
        lambda f: f.bedrooms >= APARTMENTS_MIN_BEDROOMS or f.bathrooms >= APARTMENTS_MIN_BATHROOMS,
        "apartments",
    ),
    PropertyTypeRule(
        "multi_family",
        lambda f: f.bedrooms >= MULTI_FAMILY_MIN_BEDROOMS or f.bathrooms >= MULTI_FAMILY_MIN_BATHROOMS,
        "multi_family",
    ),
    PropertyTypeRule(
        "condo",
        lambda f: f.square_footage <= CONDO_MAX_SQFT and f.lot_size <= CONDO_MAX_LOT_SQFT,
        "condo",
    ),
    PropertyTypeRule(
        "townhouse",
        lambda f: CONDO_MAX_SQFT < f.square_footage <= TOWNHOUSE_MAX_SQFT and f.lot_size <= TOWNHOUSE_MAX_LOT_SQFT,
        "townhouse",
    ),
    PropertyTypeRule("house", lambda f: True, "house"),
)


def classify_property_type(features: Mapping[str, Any] | PropertyFeatures) -> str:
    if not isinstance(features, PropertyFeatures):
        features = PropertyFeatures.from_mapping(features)
    for rule in PROPERTY_TYPE_RULES:
        if rule.predicate(features):
            return rule.result
    return "house"


def _present(value: Any) -> bool:
    return value is not None and str(value) != ""


def synthesize_display_name(canonical: Mapping[str, Any]) -> str:
    """Build ``"street, city, ST zip"`` from resolved address fields.

    The street line needs ``hs_address_1``; ``hs_address_2`` is appended to it.
    Falls back to ``"Listing {id}"`` and then ``"Listing"``.
    """
    parts: list[str] = []

    address_1 = canonical.get("hs_address_1")
    if _present(address_1):
        street = str(address_1)
        address_2 = canonical.get("hs_address_2")
        if _present(address_2):
            street = f"{street} {address_2}"
        parts.append(street)

    city = canonical.get("hs_city")
    if _present(city):
        parts.append(str(city))

    state = canonical.get("state_code") or canonical.get("hs_state_province")
    zip_code = canonical.get("hs_zip")
    state_zip = " ".join(str(value) for value in (state, zip_code) if _present(value))
    if state_zip:
        parts.append(state_zip)

    if parts:
        return ", ".join(parts)

    identifier = canonical.get("external_listing_id")
    if _present(identifier):
        return f"Listing {identifier}"
    return "Listing"

"""Ordered alias table mapping feed spellings onto canonical listing fields.

The canonical spelling is always listed first so that a feed already using
canonical names is never overridden by a looser alias. Bump
``ALIAS_TABLE_VERSION`` whenever an alias is added, removed or reordered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

ALIAS_TABLE_VERSION = 3

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
DATE = "date"
AUCTION_STATUS = "auction_status"
LISTING_TYPE = "listing_type"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    aliases: tuple[str, ...]
    kind: str
    default: Any = None


FIELD_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec("external_listing_id", ("external_listing_id", "externalListingId", "assetId", "asset_id", "id"), STRING),
    FieldSpec("reference_id", ("reference_id", "referenceId", "assetReferenceId", "asset_reference_id"), STRING),
    FieldSpec("hs_name", ("hs_name", "name", "listingName", "listing_name", "title"), STRING),
    FieldSpec("listing_start_date", ("listing_start_date", "listingStartDate", "startDate", "start_date"), DATE),
    FieldSpec("listing_end_date", ("listing_end_date", "listingEndDate", "endDate", "end_date"), DATE),
    FieldSpec("price", ("price", "listPrice", "list_price"), NUMBER),
    FieldSpec("listing_status", ("listing_status", "listingStatus", "status"), STRING),
    FieldSpec("hs_listing_type", ("hs_listing_type", "propertyType", "property_type", "type"), LISTING_TYPE),
    FieldSpec("hs_square_footage", ("hs_square_footage", "squareFootage", "square_footage", "sqft"), NUMBER),
    FieldSpec("hs_bedrooms", ("hs_bedrooms", "bedrooms", "beds"), NUMBER),
    FieldSpec("hs_bathrooms", ("hs_bathrooms", "bathrooms", "baths"), NUMBER),
    FieldSpec("hs_lot_size", ("hs_lot_size", "lotSize", "lot_size"), NUMBER),
    FieldSpec("lot_size_units", ("lot_size_units", "lotSizeUnits"), STRING),
    FieldSpec(
        "hs_address_1",
        ("hs_address_1", "addressLine1", "address_line_1", "address1", "address", "street"),
        STRING,
    ),
    FieldSpec("hs_address_2", ("hs_address_2", "addressLine2", "address_line_2", "address2", "unit"), STRING),
    FieldSpec("hs_city", ("hs_city", "city"), STRING),
    FieldSpec("hs_state_province", ("hs_state_province", "state"), STRING),
    FieldSpec("hs_zip", ("hs_zip", "zip", "zipCode", "zip_code", "postal_code"), STRING),
    FieldSpec("county", ("county",), STRING),
    FieldSpec("listing_url", ("listing_url", "listingUrl", "propertyUrl", "property_url", "url"), STRING),
    FieldSpec(
        "primary_image_url",
        ("primary_image_url", "primaryImageUrl", "imageUrl", "image_url", "mediaUrl", "media_url"),
        STRING,
    ),
    FieldSpec("is_new_listing", ("is_new_listing", "isNewListing", "isNew", "is_new"), BOOLEAN),
    FieldSpec("is_featured", ("is_featured", "isFeatured", "featured"), BOOLEAN),
    FieldSpec("marketing_eligible", ("marketing_eligible", "marketingEligible"), BOOLEAN, default=True),
    FieldSpec("auction_status", ("auction_status", "auctionStatus"), AUCTION_STATUS),
    FieldSpec("auction_start_date", ("auction_start_date", "auctionStartDate"), DATE),
    FieldSpec("auction_end_date", ("auction_end_date", "auctionEndDate"), DATE),
)
FIELD_SPECS_BY_NAME = {spec.name: spec for spec in FIELD_SPECS}

STATE_CODE_ALIASES = ("state_code", "stateCode")
STATE_NAME_ALIASES = ("state", "hs_state_province")


def resolve_first(record: Mapping[str, Any], *candidate_keys: str) -> Any:
    if not isinstance(record, Mapping):
        return None
    for key in candidate_keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def resolve_field(record: Mapping[str, Any], spec: FieldSpec) -> Any:
    return resolve_first(record, *spec.aliases)

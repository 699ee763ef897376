"""Custom listing property definitions ensured on the HubSpot listings object.

HubSpot-owned properties (``hs_*`` and the native ``price``) already exist and
are never created here. ``list_price`` is deprecated and is not recreated.
"""

from __future__ import annotations

from listings_importer.common.constants import AUCTION_STATUS_VALUES, US_STATE_NAME_TO_CODE

GROUP_NAME = "listing_information"

_BOOLEAN_OPTIONS = [
    {"label": "Yes", "value": "true"},
    {"label": "No", "value": "false"},
]


def _state_options() -> list[dict[str, str]]:
    options = [
        {"label": name.title().replace(" Of ", " of "), "value": code}
        for name, code in US_STATE_NAME_TO_CODE.items()
    ]
    return sorted(options, key=lambda option: option["label"])


def _auction_options() -> list[dict[str, str]]:
    return [{"label": value.replace("_", " ").title(), "value": value} for value in AUCTION_STATUS_VALUES]


def _prop(name: str, label: str, prop_type: str, field_type: str, description: str, **extra) -> dict:
    definition = {
        "name": name,
        "label": label,
        "type": prop_type,
        "fieldType": field_type,
        "groupName": GROUP_NAME,
        "description": description,
    }
    definition.update(extra)
    return definition


LISTINGS_PROPERTIES: list[dict] = [
    _prop("external_listing_id", "External Listing ID", "string", "text", "Unique external identifier for the listing"),
    _prop("reference_id", "Reference ID", "string", "text", "Secondary reference identifier for the listing"),
    _prop("listing_start_date", "Listing Start Date", "date", "date", "Date when the listing became active"),
    _prop("listing_end_date", "Listing End Date", "date", "date", "Date when the listing ended or expires"),
    _prop(
        "listing_status",
        "Listing Status",
        "enumeration",
        "select",
        "Current status of the listing",
        options=[
            {"label": "For Sale", "value": "for_sale"},
            {"label": "Under Contract", "value": "under_contract"},
            {"label": "Sold", "value": "sold"},
            {"label": "Withdrawn", "value": "withdrawn"},
            {"label": "Expired", "value": "expired"},
        ],
    ),
    _prop(
        "lot_size_units",
        "Lot Size Units",
        "enumeration",
        "select",
        "Units for lot size",
        options=[
            {"label": "Square Feet", "value": "sqft"},
            {"label": "Acres", "value": "acres"},
            {"label": "Square Meters", "value": "sqm"},
        ],
    ),
    _prop("state_code", "State Code", "enumeration", "select", "US state code (e.g., CA, NY, TX)", options=_state_options()),
    _prop("county", "County", "string", "text", "County where property is located"),
    _prop("listing_url", "Listing URL", "string", "text", "URL to the property listing page"),
    _prop("primary_image_url", "Primary Image URL", "string", "text", "URL to the main property image"),
    _prop(
        "is_new_listing", "Is New Listing", "bool", "booleancheckbox", "Whether this is a new listing", options=_BOOLEAN_OPTIONS
    ),
    _prop("is_featured", "Is Featured", "bool", "booleancheckbox", "Whether this listing is featured", options=_BOOLEAN_OPTIONS),
    _prop(
        "marketing_eligible",
        "Marketing Eligible",
        "bool",
        "booleancheckbox",
        "Whether this listing is eligible for marketing campaigns",
        options=_BOOLEAN_OPTIONS,
    ),
    _prop(
        "auction_status", "Auction Status", "enumeration", "select", "Status of auction if applicable", options=_auction_options()
    ),
    _prop("auction_start_date", "Auction Start Date", "date", "date", "Date when auction starts"),
    _prop("auction_end_date", "Auction End Date", "date", "date", "Date when auction ends"),
]


def listings_object_schema(name: str, identifier_property: str) -> dict:
    """Custom object schema created when the portal has no listings object yet."""
    return {
        "name": name,
        "labels": {"singular": "Listing", "plural": "Listings"},
        "primaryDisplayProperty": identifier_property,
        "requiredProperties": [identifier_property],
        "searchableProperties": [identifier_property],
        "properties": [
            {
                "name": identifier_property,
                "label": "External Listing ID",
                "type": "string",
                "fieldType": "text",
            }
        ],
        "associatedObjects": ["CONTACT", "COMPANY"],
    }

"""Application constants."""

USER_AGENT = "listings-importer/1.0 (+hubspot listings sync)"
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "stage",
    "event",
    "status",
    "external_listing_id",
    "chunk",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)

US_STATE_NAME_TO_CODE = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "district of columbia": "DC",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
}
VALID_STATE_CODES = frozenset(US_STATE_NAME_TO_CODE.values())

AUCTION_STATUS_VALUES = ("not_on_auction", "upcoming", "active", "ended", "sold")
AUCTION_STATUS_LABELS = {
    "Not on Auction": "not_on_auction",
    "Not On Auction": "not_on_auction",
    "No Auction": "not_on_auction",
    "Upcoming": "upcoming",
    "Coming Soon": "upcoming",
    "Scheduled": "upcoming",
    "For Sale": "active",
    "Active": "active",
    "Bidding Started": "active",
    "Bidding Open": "active",
    "Live": "active",
    "Ended": "ended",
    "Auction Ended": "ended",
    "Bidding Closed": "ended",
    "Closed": "ended",
    "Sold": "sold",
}

LISTING_TYPE_VALUES = (
    "house",
    "townhouse",
    "multi_family",
    "condos_co_ops",
    "lots_land",
    "apartments",
    "manufactured",
)
LISTING_TYPE_BY_CATEGORY = {
    "land": "lots_land",
    "manufactured": "manufactured",
    "apartments": "apartments",
    "multi_family": "multi_family",
    "condo": "condos_co_ops",
    "townhouse": "townhouse",
    "house": "house",
}

# Feed labels seen for property type, keyed by their lowercase, space-separated
# form. Canonical values are accepted in the same form.
LISTING_TYPE_LABELS = {
    "single family": "house",
    "single family home": "house",
    "single family residence": "house",
    "sfr": "house",
    "town house": "townhouse",
    "townhome": "townhouse",
    "multifamily": "multi_family",
    "duplex": "multi_family",
    "triplex": "multi_family",
    "fourplex": "multi_family",
    "condo": "condos_co_ops",
    "condominium": "condos_co_ops",
    "co op": "condos_co_ops",
    "coop": "condos_co_ops",
    "land": "lots_land",
    "lot": "lots_land",
    "vacant land": "lots_land",
    "apartment": "apartments",
    "mobile home": "manufactured",
    "manufactured home": "manufactured",
}

MS_PER_DAY = 86_400_000
EPOCH_SECONDS_CUTOFF = 10_000_000_000
MIN_REASONABLE_YEAR = 1900
MAX_REASONABLE_YEAR = 2100

import logging

import pytest

from listings_importer.common.errors import SkippableRecordError
from listings_importer.pipeline.transform import transform_listing, transform_listings
from listings_importer.pipeline.warnings import WarningAggregator

JAN_15_2024 = 1705276800000
FEB_15_2024 = 1707955200000


def _feed_listing(**overrides):
    listing = {
        "assetId": "A-100",
        "assetReferenceId": "REF-100",
        "listPrice": "250000",
        "status": "Active",
        "squareFootage": "2000",
        "bedrooms": 3,
        "bathrooms": "2",
        "lotSize": 8000,
        "lotSizeUnits": "sqft",
        "addressLine1": "123 Main St",
        "city": "Austin",
        "state": "Texas",
        "zipCode": "78701",
        "county": "Travis",
        "propertyUrl": "https://listings.example.com/a-100",
        "imageUrl": "https://cdn.example.com/a-100.jpg",
        "isNew": "true",
        "featured": 0,
        "auctionStatus": "For Sale",
        "auctionStartDate": "2024-01-15T14:30:45Z",
        "auctionEndDate": "2024-02-15",
    }
    listing.update(overrides)
    return listing


def test_transform_listing_resolves_aliases_and_coerces():
    warnings = WarningAggregator()
    record = transform_listing(_feed_listing(), warnings)

    assert record["external_listing_id"] == "A-100"
    assert record["reference_id"] == "REF-100"
    assert record["price"] == 250000.0
    assert record["listing_status"] == "Active"
    assert record["hs_square_footage"] == 2000.0
    assert record["hs_bathrooms"] == 2.0
    assert record["hs_address_1"] == "123 Main St"
    assert record["hs_city"] == "Austin"
    assert record["hs_state_province"] == "Texas"
    assert record["state_code"] == "TX"
    assert record["hs_zip"] == "78701"
    assert record["listing_url"] == "https://listings.example.com/a-100"
    assert record["primary_image_url"] == "https://cdn.example.com/a-100.jpg"
    assert record["is_new_listing"] is True
    assert record["is_featured"] is False
    assert record["marketing_eligible"] is True
    assert record["auction_status"] == "active"
    assert record["auction_start_date"] == JAN_15_2024
    assert record["auction_end_date"] == FEB_15_2024
    assert warnings.total == 0


def test_transform_listing_synthesizes_name_and_type():
    record = transform_listing(_feed_listing())

    assert record["hs_name"] == "123 Main St, Austin, TX 78701"
    assert record["hs_listing_type"] == "house"


def test_transform_listing_keeps_feed_name_and_type():
    record = transform_listing(_feed_listing(name="Lakeside Cottage", propertyType="townhouse"))

    assert record["hs_name"] == "Lakeside Cottage"
    assert record["hs_listing_type"] == "townhouse"


def test_transform_listing_maps_categories_to_listing_type_values():
    land = transform_listing(_feed_listing(squareFootage=0, bedrooms=0, bathrooms=0, lotSize=10000))
    condo = transform_listing(_feed_listing(squareFootage=800, bedrooms=1, bathrooms=1, lotSize=0))

    assert land["hs_listing_type"] == "lots_land"
    assert condo["hs_listing_type"] == "condos_co_ops"


def test_transform_listing_without_identifier_returns_none():
    listing = _feed_listing()
    del listing["assetId"]

    assert transform_listing(listing) is None
    assert transform_listing(_feed_listing(assetId="   ")) is None


def test_transform_listing_canonical_spelling_wins():
    record = transform_listing(_feed_listing(external_listing_id="EXT-1", price=300000))

    assert record["external_listing_id"] == "EXT-1"
    assert record["price"] == 300000.0


def test_transform_listing_bad_values_are_fail_soft():
    warnings = WarningAggregator()
    record = transform_listing(
        _feed_listing(auctionStatus="Nonsense", auctionEndDate="not a date", state="Atlantis", listPrice="call us"),
        warnings,
    )

    assert "auction_status" not in record
    assert "auction_end_date" not in record
    assert "state_code" not in record
    assert "price" not in record
    assert record["hs_city"] == "Austin"
    assert record["auction_start_date"] == JAN_15_2024
    assert warnings.count("invalid_auction_status") == 1
    assert warnings.count("invalid_date") == 1
    assert warnings.count("state_derivation_failed") == 1


def test_transform_listing_marketing_eligible_respects_feed_value():
    assert transform_listing(_feed_listing(marketingEligible="false"))["marketing_eligible"] is False


def test_transform_listing_result_is_read_only():
    record = transform_listing(_feed_listing())
    with pytest.raises(TypeError):
        record["price"] = 1


def test_transform_listings_drops_missing_ids_and_bad_entries():
    warnings = WarningAggregator()
    raw = [_feed_listing(assetId="A-1"), {"city": "Nowhere"}, "not a listing", _feed_listing(assetId="A-2")]

    records, failures = transform_listings(raw, warnings)

    assert [record["external_listing_id"] for record in records] == ["A-1", "A-2"]
    assert failures == []
    assert warnings.count("transform_error") == 1


def test_transform_listings_reports_failures_for_identified_listings(monkeypatch):
    def fail_for_b(canonical):
        if canonical["external_listing_id"] == "B-2":
            raise ValueError("address unavailable")
        return "named"

    monkeypatch.setattr("listings_importer.pipeline.transform.synthesize_display_name", fail_for_b)
    warnings = WarningAggregator()
    raw = [_feed_listing(assetId="A-1"), _feed_listing(assetId="B-2"), _feed_listing(assetId="C-3")]

    records, failures = transform_listings(raw, warnings)

    assert [record["external_listing_id"] for record in records] == ["A-1", "C-3"]
    assert failures == [
        {"external_listing_id": "B-2", "stage": "transform", "error": "ValueError: address unavailable"}
    ]
    assert warnings.count("transform_error") == 1


def test_transform_listing_wraps_failures_with_identifier(monkeypatch):
    def explode(_canonical):
        raise KeyError("hs_city")

    monkeypatch.setattr("listings_importer.pipeline.transform.synthesize_display_name", explode)

    with pytest.raises(SkippableRecordError) as excinfo:
        transform_listing(_feed_listing())
    assert excinfo.value.external_listing_id == "A-100"
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_transform_listings_logs_transform_failures(caplog):
    logger = logging.getLogger("listings_importer.test_transform")
    warnings = WarningAggregator()

    with caplog.at_level(logging.ERROR, logger=logger.name):
        transform_listings([42], warnings, logger=logger)

    assert any(getattr(record, "event", None) == "TRANSFORM_FAIL" for record in caplog.records)


def test_transform_listings_parallel_preserves_order():
    warnings = WarningAggregator()
    raw = [_feed_listing(assetId=f"A-{i}", state="Atlantis") for i in range(20)]

    records, failures = transform_listings(raw, warnings, max_workers=4)

    assert [record["external_listing_id"] for record in records] == [f"A-{i}" for i in range(20)]
    assert failures == []
    assert warnings.count("state_derivation_failed") == 20


@pytest.mark.parametrize(
    ("feed_type", "expected"),
    [
        ("Single Family", "house"),
        ("Townhome", "townhouse"),
        ("Multi-Family", "multi_family"),
        ("Condo", "condos_co_ops"),
        ("Land", "lots_land"),
        ("lots_land", "lots_land"),
    ],
)
def test_transform_listing_normalizes_feed_listing_type(feed_type, expected):
    warnings = WarningAggregator()
    record = transform_listing(_feed_listing(propertyType=feed_type), warnings)

    assert record["hs_listing_type"] == expected
    assert warnings.count("invalid_listing_type") == 0


def test_transform_listing_unknown_listing_type_falls_back_to_classifier():
    warnings = WarningAggregator()
    record = transform_listing(_feed_listing(propertyType="Castle"), warnings)

    assert record["hs_listing_type"] == "house"
    assert warnings.count("invalid_listing_type") == 1
    assert warnings.examples("invalid_listing_type") == ["Castle"]


def test_transform_listing_renders_text_fields():
    warnings = WarningAggregator()
    record = transform_listing(
        _feed_listing(status=True, county={"name": "Travis"}, zipCode=78701.0, addressLine2=["Unit 4"]),
        warnings,
    )

    assert record["listing_status"] == "true"
    assert record["hs_zip"] == "78701"
    assert "county" not in record
    assert "hs_address_2" not in record
    assert warnings.count("invalid_string_value") == 2

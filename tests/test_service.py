"""Tests for the request-body handlers."""

import base64
import json

import pytest

from shelflife.service import (
    handle_expiry,
    handle_parse,
    handle_scan,
    parse_images,
    parse_mode,
)
from shelflife.errors import InputValidationError

JPEG_B64 = base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg").decode()
SCAN_REPLY = json.dumps({
    "purchaseDate": "2024-01-08",
    "items": [{"name": "Eggs", "quantity": 12, "unit": "pcs", "confidence": 0.9}],
})


class TestParsing:
    @pytest.mark.parametrize(
        "raw, expected",
        [("fridge", "fridge"), ("Shelf", "fridge"), ("receipt", "receipt"),
         (None, "receipt"), ("anything", "receipt"), (3, "receipt")],
    )
    def test_parse_mode(self, raw, expected):
        assert parse_mode(raw) == expected

    def test_parse_images_all_sources(self):
        images = parse_images({
            "imageBase64": JPEG_B64,
            "imagesBase64": [JPEG_B64],
            "imageUrl": "https://example.com/a.jpg",
            "imageUrls": ["https://example.com/b.jpg"],
        })
        assert len(images) == 4
        assert images[2].url == "https://example.com/a.jpg"

    def test_parse_images_requires_one(self):
        with pytest.raises(InputValidationError):
            parse_images({})

    def test_parse_images_rejects_non_strings(self):
        with pytest.raises(InputValidationError):
            parse_images({"imageUrls": [42]})


class TestHandleScan:
    @pytest.mark.asyncio
    async def test_success(self, make_engine):
        engine, backend = make_engine(SCAN_REPLY)
        body = json.dumps({"mode": "shelf", "imageBase64": "data:image/jpeg;base64," + JPEG_B64})
        status, payload = await handle_scan(body, engine)

        assert status == 200
        assert payload["purchaseDate"] == "2024-01-08"
        assert payload["items"][0]["name"] == "Eggs"
        assert payload["items"][0]["shelfLifeDays"] == 21
        assert 'mode = "fridge"' in backend.calls[0][0]

    @pytest.mark.asyncio
    async def test_missing_images(self, make_engine):
        engine, _ = make_engine()
        status, payload = await handle_scan({"mode": "receipt"}, engine)
        assert status == 400
        assert "error" in payload

    @pytest.mark.asyncio
    async def test_bad_base64(self, make_engine):
        engine, _ = make_engine()
        status, _ = await handle_scan({"imageBase64": "%%%not-base64%%%"}, engine)
        assert status == 400

    @pytest.mark.asyncio
    async def test_too_many_images(self, make_engine):
        engine, backend = make_engine()
        status, payload = await handle_scan({"imagesBase64": [JPEG_B64] * 5}, engine)
        assert status == 400
        assert "too many images" in payload["error"]
        assert backend.calls == []

    @pytest.mark.parametrize(
        "body", ["{not json", "[1, 2]", b"42", b'{"mode": "\xff"}']
    )
    @pytest.mark.asyncio
    async def test_malformed_body(self, make_engine, body):
        engine, _ = make_engine()
        status, _ = await handle_scan(body, engine)
        assert status == 400

    @pytest.mark.asyncio
    async def test_model_unavailable(self, make_engine):
        engine, _ = make_engine(TimeoutError("slow"))
        status, payload = await handle_scan({"imageBase64": JPEG_B64}, engine)
        assert status == 503
        assert "error" in payload

    @pytest.mark.asyncio
    async def test_model_output_invalid(self, make_engine):
        engine, _ = make_engine("no json", "still no json")
        status, payload = await handle_scan({"imageBase64": JPEG_B64}, engine)
        assert status == 502
        assert payload["stage"] == "extract:repair"
        assert payload["sample"] == "still no json"


class TestHandleExpiry:
    @pytest.mark.parametrize(
        "body",
        [
            {"name": "Milk", "location": "fridge"},
            {"location": "fridge", "purchasedDate": "2024-01-01"},
            {"name": "Milk", "purchasedDate": "2024-01-01"},
            {},
        ],
    )
    @pytest.mark.asyncio
    async def test_missing_fields(self, make_engine, body):
        engine, _ = make_engine()
        status, payload = await handle_expiry(body, engine)
        assert status == 400
        assert payload == {
            "error": "Missing required fields. name, location, purchasedDate are required."
        }

    @pytest.mark.asyncio
    async def test_rule(self, make_engine):
        engine, _ = make_engine()
        status, payload = await handle_expiry(
            {"name": "fried rice", "location": "fridge", "purchasedDate": "2024-01-01"},
            engine,
        )
        assert status == 200
        assert payload["days"] == 1
        assert payload["source"] == "rule"
        assert payload["predictedExpiry"] == "2024-01-02T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_opened_date_alias(self, make_engine):
        engine, _ = make_engine('{"shelfLifeDays": 4, "reason": "Opened milk"}')
        status, payload = await handle_expiry(
            {
                "name": "Milk",
                "location": "fridge",
                "purchasedDate": "2024-01-01T09:30:00.000Z",
                "openedDate": "2024-01-03",
            },
            engine,
        )
        assert status == 200
        assert payload["referenceType"] == "open"
        assert payload["referenceDate"] == "2024-01-03T00:00:00+00:00"
        assert payload["days"] == 4
        assert payload["source"] == "ai"

    @pytest.mark.asyncio
    async def test_bad_purchase_date(self, make_engine):
        engine, _ = make_engine()
        status, _ = await handle_expiry(
            {"name": "Milk", "location": "fridge", "purchasedDate": "last week"}, engine
        )
        assert status == 400

    @pytest.mark.parametrize(
        "dates",
        [
            {"purchasedDate": "9999-12-31"},
            {"purchasedDate": "2024-01-01", "openDate": "9999-12-31"},
            {"purchasedDate": "2024-01-01", "openedDate": "0001-01-01"},
        ],
    )
    @pytest.mark.asyncio
    async def test_out_of_range_dates_rejected(self, make_engine, dates):
        engine, backend = make_engine()
        status, payload = await handle_expiry(
            {"name": "Milk", "location": "fridge", **dates}, engine
        )
        assert status == 400
        assert "error" in payload
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_far_best_before_ignored(self, make_engine):
        engine, _ = make_engine()
        status, payload = await handle_expiry(
            {
                "name": "fried rice",
                "location": "fridge",
                "purchasedDate": "2024-01-01",
                "bestBeforeDate": "9999-12-31",
            },
            engine,
        )
        assert status == 200
        assert payload["days"] == 1

    @pytest.mark.asyncio
    async def test_model_output_invalid(self, make_engine):
        engine, _ = make_engine("a week", "seven days")
        status, payload = await handle_expiry(
            {"name": "Milk", "location": "fridge", "purchasedDate": "2024-01-01"}, engine
        )
        assert status == 502
        assert payload["stage"] == "estimate:repair"

    @pytest.mark.asyncio
    async def test_outage_degrades(self, make_engine):
        engine, _ = make_engine(ConnectionError("refused"))
        status, payload = await handle_expiry(
            {"name": "Milk", "location": "fridge", "purchasedDate": "2024-01-01"}, engine
        )
        assert status == 200
        assert payload["source"] == "fallback"
        assert payload["days"] == 7


class TestHandleParse:
    @pytest.mark.asyncio
    async def test_single_item(self, make_engine):
        engine, backend = make_engine(json.dumps({
            "name": "organic milk", "genericName": "Organic Milk", "quantity": 2,
            "unit": "bottles", "storageLocation": "fridge", "predictedExpiry": "2024-01-17",
        }))
        status, payload = await handle_parse({"text": "2 bottles of organic milk"}, engine)

        assert status == 200
        assert payload["name"] == "organic milk"
        assert payload["quantity"] == 2
        assert payload["unit"] == "bottle"
        assert payload["shelfLifeDays"] == 7
        assert payload["predictedExpiry"] == "2024-01-17"
        assert "2 bottles of organic milk" in backend.calls[0][0]

    @pytest.mark.asyncio
    async def test_list(self, make_engine):
        engine, _ = make_engine(json.dumps({"items": [
            {"name": "Lays", "genericName": "Potato Chips", "quantity": 3, "unit": "pack",
             "storageLocation": "pantry", "predictedExpiry": "2024-04-09"},
            {"name": "organic milk", "genericName": "Milk", "quantity": 2, "unit": "bottle",
             "storageLocation": "fridge", "predictedExpiry": "2024-01-17"},
        ]}))
        status, payload = await handle_parse(
            {"text": "Bought 3 packs of Lays and 2 bottles of organic milk", "expectList": True},
            engine,
        )
        assert status == 200
        assert payload["purchaseDate"] == "2024-01-10"
        assert {i["name"] for i in payload["items"]} == {"Lays", "organic milk"}

    @pytest.mark.parametrize("body", [{}, {"text": 42}, {"text": "a"}, {"text": "   "}])
    @pytest.mark.asyncio
    async def test_rejects_missing_or_short_text(self, make_engine, body):
        engine, backend = make_engine()
        status, payload = await handle_parse(body, engine)
        assert status == 400
        assert "error" in payload
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_no_food_item(self, make_engine):
        engine, _ = make_engine('{"name": "Kitchen sponges", "quantity": 3}')
        status, payload = await handle_parse({"text": "3 kitchen sponges"}, engine)
        assert status == 400
        assert "No food item" in payload["error"]

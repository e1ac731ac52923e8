from __future__ import annotations

import unittest

from motelmap.constants import ListingStatus, Plan
from motelmap.models import Listing
from motelmap.schemas.draft import ListingDraft, split_list
from motelmap.schemas.upload import PhotoEntry
from motelmap.utils.exceptions import ValidationError


def _listing() -> Listing:
    return Listing(
        id="listing-1",
        owner_id="user_owner",
        name="Motel Lua",
        description="Suites",
        plan=Plan.PREMIUM,
        status=ListingStatus.APPROVED,
        location={"lat": -23.5, "lng": -46.6, "address": "Rua A, 10"},
        phone="1199999999",
        whatsapp=None,
        tripadvisor=None,
        hours="24h",
        periods={"twoHours": "R$ 80", "twelveHours": "R$ 200"},
        services=["Wi-Fi", "Garage"],
        accessories=["Jacuzzi"],
        photos=["p1.jpg", "p2.jpg", "p3.jpg"],
        created_at=1700000000000,
    )


class ListingDraftTestCase(unittest.TestCase):
    def test_split_list_drops_blank_items(self):
        self.assertEqual(split_list(" Wi-Fi, ,Garage ,"), ["Wi-Fi", "Garage"])
        self.assertEqual(split_list(""), [])

    def test_load_from_listing(self):
        draft = ListingDraft.from_listing(_listing(), ["https://x/p1", None, "https://x/p3"])
        self.assertEqual(draft.listing_id, "listing-1")
        self.assertEqual(draft.lat, "-23.5")
        self.assertEqual(draft.lng, "-46.6")
        self.assertEqual(draft.services, "Wi-Fi, Garage")
        self.assertEqual(draft.two_hours, "R$ 80")
        self.assertEqual(draft.four_hours, "")
        self.assertEqual(draft.whatsapp, "")
        # A photo whose URL is unavailable stays in the draft without a preview
        self.assertEqual([p.reference for p in draft.photos], ["p1.jpg", "p2.jpg", "p3.jpg"])
        self.assertEqual([p.preview_url for p in draft.photos], ["https://x/p1", None, "https://x/p3"])

    def test_round_trip_to_payload(self):
        listing = _listing()
        draft = ListingDraft.from_listing(listing, ["u1", "u2", "u3"])
        payload = draft.to_payload()
        self.assertEqual(payload.name, "Motel Lua")
        self.assertEqual(payload.plan, Plan.PREMIUM)
        self.assertEqual(payload.location.lat, -23.5)
        self.assertEqual(payload.services, ["Wi-Fi", "Garage"])
        self.assertEqual(payload.accessories, ["Jacuzzi"])
        self.assertEqual(payload.photos, ["p1.jpg", "p2.jpg", "p3.jpg"])
        self.assertIsNone(payload.whatsapp)
        document = payload.to_document()
        self.assertEqual(document["periods"], {"twoHours": "R$ 80", "twelveHours": "R$ 200"})

    def test_previews_are_not_persisted(self):
        draft = ListingDraft(
            name="N",
            lat="1",
            lng="2",
            address="A",
            photos=[PhotoEntry(reference="r.jpg", preview_url="blob:local-preview")],
        )
        self.assertEqual(draft.to_payload().photos, ["r.jpg"])

    def test_blank_periods_are_absent(self):
        payload = ListingDraft(name="N", lat="1", lng="2", address="A").to_payload()
        self.assertIsNone(payload.periods)
        self.assertIsNone(payload.to_document()["periods"])

    def test_required_fields(self):
        for missing in ("name", "address", "lat", "lng"):
            values = {"name": "N", "address": "A", "lat": "1", "lng": "2"}
            values[missing] = "  "
            with self.assertRaises(ValidationError):
                ListingDraft(**values).to_payload()

    def test_invalid_coordinates(self):
        with self.assertRaises(ValidationError):
            ListingDraft(name="N", address="A", lat="north", lng="2").to_payload()
        with self.assertRaises(ValidationError):
            ListingDraft(name="N", address="A", lat="91", lng="2").to_payload()


if __name__ == "__main__":
    unittest.main()

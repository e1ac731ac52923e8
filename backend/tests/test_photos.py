from __future__ import annotations

import unittest

from motelmap.constants import Plan
from motelmap.schemas.upload import PhotoEntry
from motelmap.services.photos import PendingFile, PhotoUploadCoordinator, check_photo_admission
from motelmap.utils.exceptions import QuotaExceededError, StorageError

from support import FakeBlobStore


def _files(count: int) -> list[PendingFile]:
    return [PendingFile(filename=f"p{i}.jpg", content=b"jpeg", content_type="image/jpeg") for i in range(count)]


class PhotoAdmissionTestCase(unittest.TestCase):
    def test_free_quota(self):
        self.assertEqual(check_photo_admission(Plan.FREE, 2, 1), 3)
        with self.assertRaises(QuotaExceededError) as ctx:
            check_photo_admission(Plan.FREE, 2, 2)
        self.assertEqual((ctx.exception.quota, ctx.exception.existing, ctx.exception.requested), (3, 2, 2))

    def test_premium_quota(self):
        self.assertEqual(check_photo_admission(Plan.PREMIUM, 3, 7), 10)
        with self.assertRaises(QuotaExceededError):
            check_photo_admission(Plan.PREMIUM, 10, 1)


class PhotoUploadCoordinatorTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.blob_store = FakeBlobStore()
        self.coordinator = PhotoUploadCoordinator(self.blob_store)
        self.existing = [PhotoEntry(reference="a.jpg"), PhotoEntry(reference="b.jpg")]

    async def test_rejected_batch_transfers_nothing(self):
        with self.assertRaises(QuotaExceededError):
            await self.coordinator.upload_batch(Plan.FREE, self.existing, _files(2))
        self.assertEqual(self.blob_store.destinations, 0)
        self.assertEqual(self.blob_store.transfers, 0)
        self.assertEqual(len(self.existing), 2)

    async def test_admitted_batch_appends_references_with_previews(self):
        photos = await self.coordinator.upload_batch(Plan.FREE, self.existing, _files(1))
        self.assertEqual(len(photos), 3)
        self.assertEqual([p.reference for p in photos[:2]], ["a.jpg", "b.jpg"])
        new = photos[2]
        self.assertIn(new.reference, self.blob_store.objects)
        self.assertEqual(new.preview_url, f"https://blobs.test/{new.reference}")
        # The input list is left untouched
        self.assertEqual(len(self.existing), 2)

    async def test_failed_transfer_releases_earlier_uploads(self):
        self.blob_store.fail_transfer_after = 2
        with self.assertRaises(StorageError):
            await self.coordinator.upload_batch(Plan.PREMIUM, [], _files(3))
        self.assertEqual(len(self.blob_store.deleted), 2)
        self.assertEqual(self.blob_store.objects, {})

    async def test_file_name_implies_missing_content_type(self):
        files = [PendingFile(filename="room.png", content=b"png")]
        photos = await self.coordinator.upload_batch(Plan.PREMIUM, [], files)
        self.assertTrue(photos[0].reference.endswith(".png"))


if __name__ == "__main__":
    unittest.main()

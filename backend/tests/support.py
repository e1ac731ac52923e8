from __future__ import annotations

import os
import unittest
from typing import Optional

import jwt
from fastapi.testclient import TestClient

from motelmap.constants import Role
from motelmap.database import Base, SessionLocal, engine
from motelmap.main import app
from motelmap.models import Listing, PhotoUpload, User
from motelmap.services.storage import BlobStore, UploadDestination, get_blob_store, new_reference
from motelmap.utils.exceptions import StorageError


def make_token(subject: str, name: str = "Test User", email: Optional[str] = None) -> str:
    payload = {"sub": subject, "name": name, "email": email or f"{subject}@motelmap.test"}
    return jwt.encode(payload, os.environ["IDP_JWT_SECRET"], algorithm="HS256")


def auth_headers(subject: str, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(subject, **claims)}"}


class FakeBlobStore(BlobStore):
    """Records blob store calls and keeps uploaded objects in memory."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.destinations = 0
        self.transfers = 0
        self.deleted: list[str] = []
        self.fail_delete_on: set[str] = set()
        self.fail_transfer_after: Optional[int] = None
        self.urls_unavailable = False

    def put(self, reference: str, content: bytes = b"img") -> str:
        self.objects[reference] = content
        return reference

    async def request_upload_destination(self, content_type=None) -> UploadDestination:
        self.destinations += 1
        reference = new_reference(content_type)
        return UploadDestination(url=f"https://blobs.test/upload/{reference}", reference=reference)

    async def transfer(self, destination, content, content_type):
        if self.fail_transfer_after is not None and self.transfers >= self.fail_transfer_after:
            raise StorageError("Upload failed: 500")
        self.transfers += 1
        self.objects[destination.reference] = content
        return destination.reference

    async def delete(self, reference):
        if reference in self.fail_delete_on:
            raise StorageError(f"Failed to delete photo {reference}: 500")
        self.deleted.append(reference)
        self.objects.pop(reference, None)

    async def get_url(self, reference):
        if self.urls_unavailable or reference not in self.objects:
            return None
        return f"https://blobs.test/{reference}"


class ApiTestCase(unittest.TestCase):
    """Runs the app against a fresh in-memory database and a fake blob store."""

    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.blob_store = FakeBlobStore()
        app.dependency_overrides[get_blob_store] = lambda: self.blob_store
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def make_user(self, subject: str, role: Optional[Role] = Role.USER) -> None:
        res = self.client.post("/api/users/me", headers=auth_headers(subject))
        self.assertEqual(res.status_code, 200, res.text)
        with SessionLocal() as db:
            user = db.query(User).filter(User.user_id == subject).one()
            user.role = role
            db.commit()

    def create_listing(self, subject: str, **overrides) -> dict:
        payload = {
            "name": "Test",
            "description": "",
            "plan": "free",
            "location": {"lat": -23.5, "lng": -46.6, "address": "X"},
            "services": [],
            "accessories": [],
            "photos": [],
        }
        payload.update(overrides)
        res = self.client.post("/api/listings", json=payload, headers=auth_headers(subject))
        self.assertEqual(res.status_code, 200, res.text)
        return res.json()

    def issue_photo(self, subject: str, reference: str) -> str:
        """Store a blob as if subject had uploaded it through an upload destination."""
        self.blob_store.put(reference)
        with SessionLocal() as db:
            db.add(PhotoUpload(reference=reference, issued_to=subject, created_at=0))
            db.commit()
        return reference

    def stored_listing(self, listing_id: str) -> Optional[Listing]:
        with SessionLocal() as db:
            listing = db.query(Listing).filter(Listing.id == listing_id).first()
            if listing is not None:
                db.expunge(listing)
            return listing

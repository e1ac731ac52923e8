"""Typed identifiers for records kept by external services."""
from typing import NewType

# Primary key of a listing row
ListingId = NewType("ListingId", str)

# Opaque object key returned by the blob store
BlobRef = NewType("BlobRef", str)

# Identity provider subject ("sub" claim)
UserSubject = NewType("UserSubject", str)

"""
Owned storage keys.

Keys are a pure function of (source reference, itinerary id), so a retried
upload overwrites the same object instead of leaving a new one behind.

Dependencies: hashlib (stdlib)
System role: Deterministic object naming for rehosted media
"""

import hashlib
import posixpath
import re
from urllib.parse import urlparse

ORIGINALS_PREFIX = "media/originals"
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _fingerprint(source_ref: str) -> str:
    return hashlib.sha256(source_ref.encode("utf-8")).hexdigest()[:12]


def source_filename(source_ref: str, default: str = "image.jpg") -> str:
    """Last path segment of a reference (URL or bare key), made key-safe."""
    path = urlparse(source_ref).path if "://" in source_ref else source_ref
    name = posixpath.basename(path.rstrip("/"))
    return _UNSAFE.sub("_", name) or default


def image_storage_key(source_ref: str, itinerary_id: str) -> str:
    return f"{ORIGINALS_PREFIX}/{itinerary_id}/{_fingerprint(source_ref)}-{source_filename(source_ref)}"


def video_storage_key(source_ref: str, itinerary_id: str) -> str:
    return f"{ORIGINALS_PREFIX}/{itinerary_id}/videos/{_fingerprint(source_ref)}.mp4"


def alt_text(source_ref: str) -> str:
    """Readable default alt text from the source filename."""
    stem = posixpath.splitext(source_filename(source_ref))[0]
    return re.sub(r"[-_]+", " ", stem).strip()

"""
Media reference extraction.

Walks an arbitrarily shaped JSON payload and collects media references
from an allowlist of key names. Subtrees under excluded keys (third-party
agency branding) are never entered, wherever they appear.

Dependencies: None
System role: Scraper output extraction, tolerant of upstream schema drift
"""

from typing import Any, Iterable

SCALAR_KEYS = frozenset({"s3Key", "headerImage"})
LIST_KEYS = frozenset({"images"})
EXCLUDED_KEYS = frozenset({"agency"})


class MediaReferenceVisitor:
    """
    Depth-first visitor collecting media references in discovery order.

    Args:
        scalar_keys: Keys whose string value is a reference
        list_keys: Keys whose list holds references (string items) or nested objects
        excluded_keys: Keys whose whole subtree is skipped
    """

    def __init__(
        self,
        scalar_keys: Iterable[str] = SCALAR_KEYS,
        list_keys: Iterable[str] = LIST_KEYS,
        excluded_keys: Iterable[str] = EXCLUDED_KEYS,
    ) -> None:
        self.scalar_keys = frozenset(scalar_keys)
        self.list_keys = frozenset(list_keys)
        self.excluded_keys = frozenset(excluded_keys)

    def collect(self, payload: Any) -> list[str]:
        """Return distinct references in first-seen order."""
        found: dict[str, None] = {}
        self._visit(payload, found)
        return list(found)

    def _visit(self, node: Any, found: dict[str, None]) -> None:
        if isinstance(node, list):
            for item in node:
                self._visit(item, found)
            return
        if not isinstance(node, dict):
            return

        for key, value in node.items():
            if key in self.excluded_keys:
                continue
            if key in self.scalar_keys and isinstance(value, str):
                if value:
                    found.setdefault(value, None)
            elif key in self.list_keys and isinstance(value, list):
                for item in value:
                    if isinstance(item, str):
                        if item:
                            found.setdefault(item, None)
                    else:
                        self._visit(item, found)
            elif isinstance(value, (dict, list)):
                self._visit(value, found)


def extract_media_references(payload: Any) -> list[str]:
    """Media references in a rendered itinerary payload, agency branding excluded."""
    return MediaReferenceVisitor().collect(payload)

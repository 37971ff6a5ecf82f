"""
Endpoint discovery diagnostics.

When an expected portal response is not captured, the observed ``/api/``
JSON responses are grouped by path and matched against keywords of the
missing targets, so an operator can spot a renamed endpoint quickly.

Dependencies: None
System role: Scraper failure triage
"""

from collections import OrderedDict
from urllib.parse import urlparse

from itinerary_pipeline.models.scrape_result import ObservedResponse

ITINERARY_TARGET = "itinerary"
RENDER_TARGET = "render"

TARGET_KEYWORDS: dict[str, tuple[str, ...]] = {
    ITINERARY_TARGET: ("itinerar",),
    RENDER_TARGET: ("render", "presentation"),
}


def group_api_responses(observed: list[ObservedResponse]) -> "OrderedDict[str, list[ObservedResponse]]":
    """Observed JSON responses under ``/api/``, grouped by URL path."""
    groups: OrderedDict[str, list[ObservedResponse]] = OrderedDict()
    for response in observed:
        if "/api/" not in response.url or "json" not in response.content_type.lower():
            continue
        groups.setdefault(urlparse(response.url).path, []).append(response)
    return groups


def suggest_endpoints(observed: list[ObservedResponse], missing: list[str]) -> dict[str, list[str]]:
    """
    Suggest candidate paths for each missing capture target.

    Args:
        observed: Every response seen during the attempt
        missing: Names of the targets that were not captured

    Returns:
        ``{target: [path, ...]}`` for targets with at least one candidate
    """
    groups = group_api_responses(observed)
    suggestions: dict[str, list[str]] = {}
    for target in missing:
        keywords = TARGET_KEYWORDS.get(target, ())
        candidates = [path for path in groups if any(k in path.lower() for k in keywords)]
        if candidates:
            suggestions[target] = candidates
    return suggestions

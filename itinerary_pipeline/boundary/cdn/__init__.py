"""
Partner origin CDN adapter.
"""

from itinerary_pipeline.boundary.cdn.origin_cdn_client import DownloadedAsset, OriginCdnClient

__all__ = ["DownloadedAsset", "OriginCdnClient"]

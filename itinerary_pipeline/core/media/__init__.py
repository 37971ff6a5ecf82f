"""
Media processing: global deduplication, chunked image rehosting and video conversion.
"""

from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator, Resolution
from itinerary_pipeline.core.media.image_processor import ImageChunkProcessor, media_fields
from itinerary_pipeline.core.media.row_processor import ChunkTally, MediaRowProcessor
from itinerary_pipeline.core.media.storage_keys import alt_text, image_storage_key, video_storage_key
from itinerary_pipeline.core.media.video_converter import HlsVideoConverter
from itinerary_pipeline.core.media.video_processor import VideoProcessor

__all__ = [
    "ChunkTally",
    "HlsVideoConverter",
    "ImageChunkProcessor",
    "MediaDeduplicator",
    "MediaRowProcessor",
    "Resolution",
    "VideoProcessor",
    "alt_text",
    "image_storage_key",
    "media_fields",
    "video_storage_key",
]

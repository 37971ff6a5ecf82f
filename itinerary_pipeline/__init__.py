"""
Itinerary ingestion pipeline.

Scrapes partner itineraries, rehosts and deduplicates their media, and
produces versioned draft itinerary documents in the content store.
"""

__version__ = "0.1.0"

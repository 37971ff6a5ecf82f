"""
Document store boundary: REST client and per-collection CRUD.
"""

from itinerary_pipeline.boundary.store.store_client import StoreClient, build_where_params

__all__ = ["StoreClient", "build_where_params"]

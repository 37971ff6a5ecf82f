"""
Base CRUD operations for store collections.

Provides generic Create, Read, Update operations over one store collection,
returning pydantic models. Entity-specific CRUD classes extend it with
their own queries.

Dependencies: pydantic, itinerary_pipeline.boundary.store.store_client
System role: Foundation for all store CRUD operations
"""

from typing import Any, Generic, Iterator, TypeVar

from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.models.base import StoreModel

ModelT = TypeVar("ModelT", bound=StoreModel)

PAGE_SIZE = 100


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations on one collection.

    Type Parameters:
        ModelT: StoreModel subclass describing the collection's documents

    Attributes:
        client: Store client used for every request
        model: Model class documents are validated into
        collection: Collection slug
    """

    collection: str = ""

    def __init__(self, client: StoreClient, model: type[ModelT]) -> None:
        """
        Initialize CRUD with store client and target model.

        Args:
            client: Store client (real or test double)
            model: Model class for validation of returned documents
        """
        self.client = client
        self.model = model

    def to_store_fields(self, **fields: Any) -> dict[str, Any]:
        """
        Convert snake_case keyword fields into the store's camelCase JSON.

        Unknown names pass through unchanged.
        """
        data = {}
        for name, value in fields.items():
            field = self.model.model_fields.get(name)
            if field is None:
                key = name
            else:
                key = field.serialization_alias or field.alias or to_camel(name)
            data[key] = to_jsonable_python(value, by_alias=True)
        return data

    def _validate(self, doc: dict[str, Any]) -> ModelT:
        return self.model.model_validate(doc)

    def get_by_id(self, doc_id: str) -> ModelT | None:
        """
        Retrieve a single document by id.

        Returns:
            Model instance if found, None otherwise
        """
        doc = self.client.get_by_id(self.collection, doc_id)
        return self._validate(doc) if doc else None

    def create(self, data: dict[str, Any]) -> ModelT:
        """
        Create a document from store-shaped data.

        Args:
            data: camelCase document fields

        Returns:
            Created model instance with its store-assigned id
        """
        return self._validate(self.client.create(self.collection, data))

    def update(self, doc_id: str, **fields: Any) -> ModelT:
        """
        Patch the given snake_case fields on a document.

        Returns:
            Updated model instance
        """
        return self._validate(self.client.update(self.collection, doc_id, self.to_store_fields(**fields)))

    def find(self, where: dict[str, Any] | None = None, limit: int = PAGE_SIZE) -> list[ModelT]:
        """Return up to ``limit`` documents matching ``where``."""
        docs = self.client.find(self.collection, where, limit=limit)["docs"]
        return [self._validate(doc) for doc in docs]

    def iter_all(self, where: dict[str, Any] | None = None, page_size: int = PAGE_SIZE) -> Iterator[ModelT]:
        """Yield every document matching ``where``, following pagination."""
        page = 1
        while True:
            result = self.client.find(self.collection, where, limit=page_size, page=page)
            for doc in result["docs"]:
                yield self._validate(doc)
            if not result.get("hasNextPage"):
                return
            page += 1

    def find_one(self, where: dict[str, Any]) -> ModelT | None:
        doc = self.client.find_one(self.collection, where)
        return self._validate(doc) if doc else None

    def count(self, where: dict[str, Any] | None = None) -> int:
        return self.client.count(self.collection, where)

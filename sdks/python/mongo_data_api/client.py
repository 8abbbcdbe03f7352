"""
Data API Python Client
PyMongo-style interface where every operation is one HTTP POST.

Usage:
    from mongo_data_api import MongoClient

    client = MongoClient(
        endpoint="https://data.mongodb-api.com/app/data-abc/endpoint/data/v1",
        data_source="Cluster0",
        auth={"apiKey": "..."},
    )
    users = client["mydb"]["users"]

    # Insert
    result = users.insert_one({"name": "Alice", "email": "alice@example.com"})

    # Find
    docs = users.find({"name": "Alice"}, limit=10)

    # Update
    users.update_one({"name": "Alice"}, {"$set": {"age": 30}})

    # Count
    users.count_documents({"age": {"$gte": 18}})

    # Delete
    users.delete_one({"name": "Alice"})
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

import requests

from .config import AuthOptions, ClientConfig, build_headers
from .errors import DataApiConnectionError, DataApiRequestError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Dict[str, Any])

Document = Dict[str, Any]

# always taken from the handle chain, never from an operation fragment
ENVELOPE_FIELDS = ("collection", "database", "dataSource")


class InsertOneResult:
    """Result of an insert_one operation."""

    def __init__(self, data: dict):
        self.raw_result = data
        self.inserted_id = data.get("insertedId")

    def __repr__(self):
        return f"InsertOneResult(inserted_id={self.inserted_id!r})"


class InsertManyResult:
    """Result of an insert_many operation."""

    def __init__(self, data: dict):
        self.raw_result = data
        self.inserted_ids = data.get("insertedIds", [])

    def __repr__(self):
        return f"InsertManyResult(inserted_ids={self.inserted_ids!r})"


class UpdateResult:
    """Result of an update or replace operation."""

    def __init__(self, data: dict):
        self.raw_result = data
        self.matched_count = data.get("matchedCount", 0)
        self.modified_count = data.get("modifiedCount", 0)
        self.upserted_id = data.get("upsertedId")

    def __repr__(self):
        return (
            f"UpdateResult(matched={self.matched_count}, modified={self.modified_count}, "
            f"upserted_id={self.upserted_id!r})"
        )


class DeleteResult:
    """Result of a delete operation."""

    def __init__(self, data: dict):
        self.raw_result = data
        self.deleted_count = data.get("deletedCount", 0)

    def __repr__(self):
        return f"DeleteResult(deleted={self.deleted_count})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first_count(documents: List[dict]) -> int:
    if documents:
        return documents[0]["n"]
    return 0


class HttpTransport:
    """Sends Data API actions over HTTP."""

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self._config = config
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def build_body(
        self,
        collection: str,
        database: str,
        fragment: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Merge an operation fragment into the request envelope.

        Fragment values of ``None`` are left out. Fragment keys that collide
        with an envelope field are dropped.
        """
        body: Dict[str, Any] = {
            "collection": collection,
            "database": database,
            "dataSource": self._config.data_source,
        }
        for key, value in fragment.items():
            if key in ENVELOPE_FIELDS:
                logger.warning("Ignoring reserved field %r in %s.%s request", key, database, collection)
                continue
            if value is None:
                continue
            body[key] = value
        return body

    def call_action(
        self,
        operation: str,
        collection: str,
        database: str,
        fragment: Mapping[str, Any],
    ) -> Any:
        """POST one action and return the decoded JSON response."""
        url = self._config.action_url(operation)
        body = self.build_body(collection, database, fragment)
        logger.debug("Data API %s on %s.%s", operation, database, collection)

        try:
            resp = self._session.post(
                url,
                headers=dict(self._config.headers),
                json=body,
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            raise DataApiConnectionError(str(e)) from e

        logger.debug("Data API %s answered %s", operation, resp.status_code)
        return self._handle_response(resp)

    def _handle_response(self, resp: requests.Response) -> Any:
        """Return the JSON payload of a 2xx response, raise otherwise."""
        if not 200 <= resp.status_code < 300:
            raise DataApiRequestError(resp.reason, resp.text, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise DataApiRequestError(resp.reason, resp.text, status_code=resp.status_code) from e

    def close(self):
        """Close the HTTP session if this transport created it."""
        if self._owns_session:
            self._session.close()


class Collection(Generic[T]):
    """Represents a collection. PyMongo-style API."""

    def __init__(self, name: str, database: "Database"):
        self._name = name
        self._database = database
        self._client = database.client

    @property
    def name(self) -> str:
        return self._name

    @property
    def full_name(self) -> str:
        return f"{self._database.name}.{self._name}"

    @property
    def database(self) -> "Database":
        return self._database

    @property
    def client(self) -> "MongoClient":
        return self._client

    def _call(self, operation: str, fragment: Mapping[str, Any]) -> Any:
        return self._client.transport.call_action(
            operation, self._name, self._database.name, fragment
        )

    def insert_one(self, document: T) -> InsertOneResult:
        """Insert a single document."""
        result = self._call("insertOne", {"document": document})
        return InsertOneResult(result)

    def insert_many(self, documents: List[T]) -> InsertManyResult:
        """Insert multiple documents."""
        result = self._call("insertMany", {"documents": documents})
        return InsertManyResult(result)

    def find_one(
        self,
        filter: Document,
        projection: Optional[Document] = None,
    ) -> Optional[T]:
        """Find a single document matching a filter."""
        result = self._call("findOne", {"filter": filter, "projection": projection})
        return result.get("document")

    def find(
        self,
        filter: Optional[Document] = None,
        projection: Optional[Document] = None,
        sort: Optional[Document] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[T]:
        """Find documents matching a filter."""
        result = self._call(
            "find",
            {
                "filter": filter,
                "projection": projection,
                "sort": sort,
                "limit": limit,
                "skip": skip,
            },
        )
        return result.get("documents", [])

    def update_one(
        self,
        filter: Document,
        update: Document,
        upsert: Optional[bool] = None,
    ) -> UpdateResult:
        """Update a single document matching a filter."""
        result = self._call(
            "updateOne", {"filter": filter, "update": update, "upsert": upsert}
        )
        return UpdateResult(result)

    def update_many(
        self,
        filter: Document,
        update: Document,
        upsert: Optional[bool] = None,
    ) -> UpdateResult:
        """Update every document matching a filter."""
        result = self._call(
            "updateMany", {"filter": filter, "update": update, "upsert": upsert}
        )
        return UpdateResult(result)

    def replace_one(
        self,
        filter: Document,
        replacement: T,
        upsert: Optional[bool] = None,
    ) -> UpdateResult:
        """Replace a single document matching a filter."""
        result = self._call(
            "replaceOne",
            {"filter": filter, "replacement": replacement, "upsert": upsert},
        )
        return UpdateResult(result)

    def delete_one(self, filter: Document) -> DeleteResult:
        """Delete a single document matching a filter."""
        result = self._call("deleteOne", {"filter": filter})
        return DeleteResult(result)

    def delete_many(self, filter: Document) -> DeleteResult:
        """Delete every document matching a filter."""
        result = self._call("deleteMany", {"filter": filter})
        return DeleteResult(result)

    def aggregate(self, pipeline: List[Document]) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline and return the resulting documents."""
        result = self._call("aggregate", {"pipeline": pipeline})
        return result.get("documents", [])

    def count_documents(
        self,
        filter: Optional[Document] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> int:
        """Count documents matching a filter.

        Runs as an aggregation: ``$match``, ``$skip`` and ``$limit`` stages are
        added in that order when given, followed by a single ``$group``.
        """
        pipeline: List[Document] = []
        if filter is not None:
            pipeline.append({"$match": filter})
        if _is_number(skip):
            pipeline.append({"$skip": skip})
        if _is_number(limit):
            pipeline.append({"$limit": limit})
        pipeline.append({"$group": {"_id": 1, "n": {"$sum": 1}}})

        return _first_count(self.aggregate(pipeline))

    def estimated_document_count(self) -> int:
        """Estimate the total document count from collection statistics."""
        pipeline = [
            {"$collStats": {"count": {}}},
            {"$group": {"_id": 1, "n": {"$sum": "$count"}}},
        ]
        return _first_count(self.aggregate(pipeline))

    def __repr__(self):
        return f"Collection({self.full_name!r})"


class Database:
    """Represents a database. PyMongo-style API."""

    def __init__(self, name: str, client: "MongoClient"):
        self._name = name
        self._client = client

    @property
    def name(self) -> str:
        return self._name

    @property
    def client(self) -> "MongoClient":
        return self._client

    def __getitem__(self, name: str) -> Collection:
        return self.get_collection(name)

    def __getattr__(self, name: str) -> Collection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_collection(name)

    def get_collection(
        self,
        name: str,
        document_class: Optional[Type[T]] = None,
    ) -> Collection[T]:
        """Get a collection by name.

        ``document_class`` only narrows the static type of the documents.
        """
        return Collection(name, self)

    def collection(
        self,
        name: str,
        document_class: Optional[Type[T]] = None,
    ) -> Collection[T]:
        return self.get_collection(name, document_class)

    def __repr__(self):
        return f"Database({self._name!r})"


class MongoClient:
    """
    Data API client - PyMongo-style interface.

    Usage:
        client = MongoClient(
            endpoint="https://data.mongodb-api.com/app/data-abc/endpoint/data/v1",
            data_source="Cluster0",
            auth={"email": "me@example.com", "password": "..."},
        )
        users = client["mydb"]["users"]
        users.insert_one({"name": "Alice"})

    ``session`` may be any object with a ``requests.Session``-compatible
    ``post``; without one the client creates (and closes) its own.
    """

    def __init__(
        self,
        endpoint: str,
        data_source: str,
        auth: Union[AuthOptions, Mapping[str, Any]],
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        headers = build_headers(auth)
        self._config = ClientConfig(
            endpoint=endpoint.rstrip("/"),
            data_source=data_source,
            headers=headers,
            timeout=timeout,
        )
        self._transport = HttpTransport(self._config, session)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def data_source(self) -> str:
        return self._config.data_source

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._config.headers)

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def __getitem__(self, name: str) -> Database:
        return self.get_database(name)

    def __getattr__(self, name: str) -> Database:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_database(name)

    def get_database(self, name: str) -> Database:
        """Get a database by name."""
        return Database(name, self)

    def database(self, name: str) -> Database:
        return self.get_database(name)

    def close(self):
        """Close the underlying HTTP session if the client created it."""
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self):
        return f"MongoClient(endpoint='{self.endpoint}', data_source='{self.data_source}')"

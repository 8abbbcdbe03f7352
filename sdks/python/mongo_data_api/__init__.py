"""
Data API Python client
MongoDB-style client for HTTP "Data API" endpoints.
Each collection operation is sent as a single POST to {endpoint}/action/{operation}.
"""

from .client import (
    MongoClient,
    Database,
    Collection,
    InsertOneResult,
    InsertManyResult,
    UpdateResult,
    DeleteResult,
)
from .config import ApiKeyAuth, JwtAuth, EmailPasswordAuth, ClientConfig
from .errors import (
    DataApiError,
    InvalidAuthOptionsError,
    DataApiRequestError,
    DataApiConnectionError,
)

__version__ = "1.0.0"
__all__ = [
    "MongoClient",
    "Database",
    "Collection",
    "InsertOneResult",
    "InsertManyResult",
    "UpdateResult",
    "DeleteResult",
    "ApiKeyAuth",
    "JwtAuth",
    "EmailPasswordAuth",
    "ClientConfig",
    "DataApiError",
    "InvalidAuthOptionsError",
    "DataApiRequestError",
    "DataApiConnectionError",
]

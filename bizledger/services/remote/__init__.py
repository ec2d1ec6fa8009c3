"""
Remote Store Package

Provides the abstract remote store interface and its implementations.
The REST API is the production backend; the in-memory store backs tests.
"""

from bizledger.services.remote.interface import (
    MalformedResponseError,
    NotFoundError,
    RemoteClient,
    RemoteConnectionError,
    RemoteError,
)
from bizledger.services.remote.http_client import HttpRemoteClient
from bizledger.services.remote.memory import InMemoryRemoteClient

__all__ = [
    # Interface
    "RemoteClient",
    # Exceptions
    "MalformedResponseError",
    "NotFoundError",
    "RemoteConnectionError",
    "RemoteError",
    # Implementations
    "HttpRemoteClient",
    "InMemoryRemoteClient",
]

"""Services package."""

from bizledger.services.remote import (
    HttpRemoteClient,
    InMemoryRemoteClient,
    MalformedResponseError,
    NotFoundError,
    RemoteClient,
    RemoteConnectionError,
    RemoteError,
)

__all__ = [
    "HttpRemoteClient",
    "InMemoryRemoteClient",
    "MalformedResponseError",
    "NotFoundError",
    "RemoteClient",
    "RemoteConnectionError",
    "RemoteError",
]

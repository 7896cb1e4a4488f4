"""
Core layer - Raw types and RPC client.

This layer provides:
- Typed dataclasses matching the API payloads
- Request building, response classification and cursor pagination
- A pluggable transport with a urllib default
"""

from dropbox_rpc.core.client import (
    APIClient,
    ClientConfig,
    DropboxError,
    RemoteError,
    Request,
    Response,
    SerializationError,
    Transport,
    TransportError,
    UnexpectedError,
    URLParseError,
    UrllibTransport,
    check_content_type,
    check_response,
)
from dropbox_rpc.core.types import AccountInfo, CursorPage, Entry, ListFolderResult, Username

__all__ = [
    "APIClient",
    "AccountInfo",
    "ClientConfig",
    "CursorPage",
    "DropboxError",
    "Entry",
    "ListFolderResult",
    "RemoteError",
    "Request",
    "Response",
    "SerializationError",
    "Transport",
    "TransportError",
    "URLParseError",
    "UnexpectedError",
    "UrllibTransport",
    "Username",
    "check_content_type",
    "check_response",
]

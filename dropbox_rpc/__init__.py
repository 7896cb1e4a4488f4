"""
dropbox-rpc - Minimal client for the Dropbox RPC API.

Layers:
- core: Request building, response classification, pagination and types
- sdk: High-level DropboxClient with service facades
- cli: Small command-line front-end
"""

from dropbox_rpc.core.client import LIBRARY_VERSION
from dropbox_rpc.sdk import DropboxClient

__version__ = LIBRARY_VERSION
__all__ = ["DropboxClient"]

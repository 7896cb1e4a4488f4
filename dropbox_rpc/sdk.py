"""
Dropbox SDK - High-level client with typed service facades.

Built on top of the core APIClient.
"""

import logging
from collections.abc import Iterator
from typing import Any

from dropbox_rpc.core.client import APIClient, ClientConfig, Response, Transport, UrllibTransport
from dropbox_rpc.core.types import AccountInfo, CursorPage, Entry, ListFolderResult

logger = logging.getLogger(__name__)


class DropboxClient:
    """
    High-level Dropbox client.

    Example:
        client = DropboxClient(bearer_token=token)

        account, _ = client.users.get_account()
        entries, _ = client.files.list_folder("/photos")

    """

    def __init__(
        self,
        transport: Transport | None = None,
        bearer_token: str | None = None,
        config: ClientConfig | None = None,
        **overrides: Any,
    ):
        """
        Initialize the Dropbox client.

        Args:
            transport: Already-authenticated transport. When omitted a
                UrllibTransport is built, using bearer_token if given.
            bearer_token: OAuth2 access token for the default transport
            config: Base configuration (defaults to ClientConfig.from_env())
            **overrides: Config fields to override (base_url, user_agent, ...)

        """
        base = config if config is not None else ClientConfig.from_env()
        base = base.replace(**overrides)
        if transport is None:
            transport = UrllibTransport(timeout=base.timeout, bearer_token=bearer_token)
        self._client = APIClient(transport=transport, config=base)

        self.users = UsersOperations(self._client)
        self.files = FilesOperations(self._client)

    @property
    def api(self) -> APIClient:
        """The underlying core client."""
        return self._client


# =============================================================================
# Users
# =============================================================================


class UsersOperations:
    """Operations on user accounts."""

    def __init__(self, client: APIClient):
        self._client = client

    def get_account(self) -> tuple[AccountInfo, Response]:
        """
        Get the current user's account.

        Returns:
            (AccountInfo, response)

        """
        info, response = self._client.rpc("2-beta/users/get_current_account", parser=AccountInfo.from_dict)
        return info, response


# =============================================================================
# Files
# =============================================================================


class FilesOperations:
    """Operations on files and folders."""

    def __init__(self, client: APIClient):
        self._client = client

    def list_folder_page(self, path: str, cursor: str = "") -> CursorPage[Entry]:
        """
        Fetch a single page of a folder listing.

        Args:
            path: Folder path ("" for the root)
            cursor: Cursor from the previous page, "" for the first page

        """
        params = {"path": path}
        if cursor:
            params["cursor"] = cursor
        result, response = self._client.rpc("2-beta/files/list_folder", params, parser=ListFolderResult.from_dict)
        return result.to_page(response)

    def iter_folder(self, path: str) -> Iterator[Entry]:
        """Lazily iterate over every entry of a folder, page by page."""
        return self._client.paginate(lambda cursor: self.list_folder_page(path, cursor))

    def list_folder(self, path: str) -> tuple[list[Entry], Response | None]:
        """
        List every entry of a folder, following continuation cursors.

        Returns:
            (entries in server order, response of the last page)

        Raises:
            DropboxError: On any page failure; nothing is returned in that case

        """
        entries, response = self._client.paginate_all(lambda cursor: self.list_folder_page(path, cursor))
        logger.debug("Listed %d entries in %r", len(entries), path)
        return entries, response

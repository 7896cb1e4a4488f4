"""
Live API smoke tests.

Run with: python -m pytest tests/test_live.py -v -s
Requires: DROPBOX_TOKEN environment variable (or a .env file)
"""

import os

import pytest

from dropbox_rpc.core.client import DropboxError
from dropbox_rpc.sdk import DropboxClient

TOKEN = os.environ.get("DROPBOX_TOKEN")
LIST_PATH = os.environ.get("DROPBOX_TEST_PATH", "")


@pytest.fixture(scope="module")
def require_credentials():
    """Skip test if credentials not available."""
    if not TOKEN:
        pytest.skip("DROPBOX_TOKEN required")
    return True


@pytest.fixture(scope="module")
def live_client(require_credentials):
    return DropboxClient(bearer_token=TOKEN)


def test_get_account(live_client):
    try:
        info, response = live_client.users.get_account()
    except DropboxError as e:
        pytest.fail(f"get_current_account failed: {e.to_dict()}")
    assert response.status == 200
    assert info.account_id


def test_list_folder(live_client):
    try:
        entries, _ = live_client.files.list_folder(LIST_PATH)
    except DropboxError as e:
        pytest.fail(f"list_folder failed: {e.to_dict()}")
    assert all(entry.name for entry in entries)

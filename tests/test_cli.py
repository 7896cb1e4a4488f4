"""
CLI tests - commands run in-process against an in-memory transport.

Output is captured (not a TTY), so commands print JSON.
"""

import io
import json

import pytest

from dropbox_rpc import cli
from dropbox_rpc.core.client import ClientConfig, Response
from dropbox_rpc.sdk import DropboxClient


class StalledBody(io.RawIOBase):
    """A body whose reads time out."""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        raise TimeoutError("read timed out")


@pytest.fixture
def tokens(monkeypatch, transport):
    """Route the CLI's client through the fake transport; record tokens used."""
    seen = []

    def factory(bearer_token=None):
        seen.append(bearer_token)
        return DropboxClient(transport=transport, config=ClientConfig())

    monkeypatch.setattr(cli, "DropboxClient", factory)
    monkeypatch.delenv("DROPBOX_TOKEN", raising=False)
    return seen


class TestCommands:
    def test_account(self, tokens, transport, capsys):
        transport.add_json({"account_id": "dbid:1", "name": {"display_name": "Franz"}, "email": "f@example.com"})
        cli.main(["--token", "abc", "account"])

        out = json.loads(capsys.readouterr().out)
        assert out["name"]["display_name"] == "Franz"
        assert out["email"] == "f@example.com"
        assert tokens == ["abc"]

    def test_ls_root(self, tokens, transport, capsys, monkeypatch):
        monkeypatch.setenv("DROPBOX_TOKEN", "from-env")
        transport.add_json({"entries": [{"name": "a"}], "footer": {"cursor": "c1", "has_more": True}})
        transport.add_json({"entries": [{"name": "b"}], "footer": {"has_more": False}})
        cli.main(["ls"])

        out = json.loads(capsys.readouterr().out)
        assert out == {"entries": [{"name": "a"}, {"name": "b"}]}
        assert transport.requests[0].json() == {"path": ""}
        assert tokens == ["from-env"]

    def test_ls_path(self, tokens, transport, capsys):
        transport.add_json({"entries": [], "footer": {"has_more": False}})
        cli.main(["-t", "abc", "ls", "/photos"])
        assert transport.requests[0].json() == {"path": "/photos"}

    def test_error_exits_with_json(self, tokens, transport, capsys):
        transport.add_json({"reason": "path/not_found/"}, status=409)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--token", "abc", "ls", "/missing"])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out) == {"error": "path/not_found/", "status": 409}

    @pytest.mark.parametrize("argv", [["account"], ["ls", "/photos"]])
    def test_body_read_failure_exits_with_json(self, tokens, transport, capsys, argv):
        transport.add(Response(400, {"Content-Type": "text/plain"}, io.BufferedReader(StalledBody())))
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--token", "abc", *argv])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out) == {"error": "read timed out"}


class TestArguments:
    def test_missing_token(self, tokens, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["account"])
        assert exc_info.value.code == 2
        assert "bearer token" in capsys.readouterr().err
        assert tokens == []

    def test_no_command_prints_help(self, tokens, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 0
        assert "dropbox-rpc" in capsys.readouterr().out

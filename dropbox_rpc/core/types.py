"""
Core types for the Dropbox RPC API payloads.

These dataclasses mirror the JSON shapes of the modeled endpoints.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

# =============================================================================
# Pagination
# =============================================================================


T = TypeVar("T")


def _expect(value: Any, kind: type, what: str) -> Any:
    """Raise TypeError unless value is of the given JSON kind."""
    if not isinstance(value, kind):
        raise TypeError(f"{what} must be a JSON {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class CursorPage(Generic[T]):
    """One page of a cursor-paginated listing."""

    data: list[T]
    cursor: str | None = None
    has_more: bool = False
    response: Any = field(default=None, repr=False, compare=False)

    @property
    def next_cursor(self) -> str | None:
        """Cursor for the next page, or None when the listing is complete."""
        if self.has_more and self.cursor:
            return self.cursor
        return None


# =============================================================================
# User Types
# =============================================================================


@dataclass
class Username:
    """The parts of a user's name."""

    given_name: str = ""
    surname: str = ""
    familiar_name: str = ""
    display_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Username":
        """Create from API response dict."""
        _expect(data, dict, "name")
        return cls(
            given_name=data.get("given_name", ""),
            surname=data.get("surname", ""),
            familiar_name=data.get("familiar_name", ""),
            display_name=data.get("display_name", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "given_name": self.given_name,
            "surname": self.surname,
            "familiar_name": self.familiar_name,
            "display_name": self.display_name,
        }


@dataclass
class AccountInfo:
    """The current user's account."""

    account_id: str
    name: Username = field(default_factory=Username)
    email: str = ""
    # Two-letter country code, if available
    country: str = ""
    locale: str = ""
    referral_link: str = ""
    is_paired: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountInfo":
        """Create from API response dict."""
        _expect(data, dict, "account")
        return cls(
            account_id=data["account_id"],
            name=Username.from_dict(data.get("name") or {}),
            email=data.get("email", ""),
            country=data.get("country", ""),
            locale=data.get("locale", ""),
            referral_link=data.get("referral_link", ""),
            is_paired=data.get("is_paired", False),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "account_id": self.account_id,
            "name": self.name.to_dict(),
            "email": self.email,
            "country": self.country,
            "locale": self.locale,
            "referral_link": self.referral_link,
            "is_paired": self.is_paired,
        }


# =============================================================================
# File Types
# =============================================================================


@dataclass
class Entry:
    """A file or folder in a listing."""

    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Create from API response dict."""
        _expect(data, dict, "entry")
        return cls(name=data["name"])

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {"name": self.name}


@dataclass
class ListFolderResult:
    """A list_folder response: entries plus a footer with the cursor."""

    entries: list[Entry] = field(default_factory=list)
    cursor: str = ""
    has_more: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListFolderResult":
        """Create from API response dict."""
        _expect(data, dict, "list_folder result")
        # A missing or null footer means the listing is complete
        footer = data.get("footer")
        footer = {} if footer is None else _expect(footer, dict, "footer")
        entries = data.get("entries")
        entries = [] if entries is None else _expect(entries, list, "entries")
        return cls(
            entries=[Entry.from_dict(e) for e in entries],
            cursor=footer.get("cursor") or "",
            has_more=bool(footer.get("has_more", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape; the cursor is omitted when empty."""
        footer: dict[str, Any] = {"has_more": self.has_more}
        if self.cursor:
            footer["cursor"] = self.cursor
        return {
            "entries": [e.to_dict() for e in self.entries],
            "footer": footer,
        }

    def to_page(self, response: Any = None) -> CursorPage[Entry]:
        """Convert to a CursorPage for pagination."""
        return CursorPage(data=self.entries, cursor=self.cursor, has_more=self.has_more, response=response)

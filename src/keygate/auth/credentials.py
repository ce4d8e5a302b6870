"""Credential presented by a caller, before authentication."""

from __future__ import annotations


class PresentedApiKey:
    """An API key as presented in a request header.

    Holds the raw secret only until adjudication finishes. After
    ``erase_credentials()`` the secret is gone; ``repr`` never shows it.
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: object) -> None:
        self._secret: object | None = secret

    @classmethod
    def from_header(cls, value: str | None) -> PresentedApiKey:
        return cls(value)

    @property
    def secret(self) -> object | None:
        return self._secret

    @property
    def is_erased(self) -> bool:
        return self._secret is None

    def erase_credentials(self) -> None:
        self._secret = None

    def __repr__(self) -> str:
        state = "erased" if self._secret is None else "***"
        return f"PresentedApiKey({state})"

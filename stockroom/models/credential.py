"""Credential record data model."""

from dataclasses import dataclass


@dataclass
class CredentialRecord:
    """A registered user and the token used to verify their password."""

    username: str
    password_token: str

    def __repr__(self) -> str:
        return f"CredentialRecord(username={self.username!r})"

"""Credential store: registration, login and logout backed by a snapshot file."""

import os
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from .codec import BinaryRecordCodec
from .snapshot_store import SnapshotStore
from ..models.credential import CredentialRecord
from ..security.password_hasher import PasswordHasher
from ..utils.config import AuthConfig, get_config
from ..utils.exceptions import (
    ConfigurationError,
    DuplicateUserError,
    EmptyFieldError,
    InvalidCredentialsError,
    WeakPasswordError,
)
from ..utils.logger import get_auth_logger


INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class CredentialStore(SnapshotStore[CredentialRecord]):
    """Usernames mapped to password tokens, plus the current session user."""

    record_label = "user"

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        auth_config: Optional[AuthConfig] = None,
        hasher: Optional[PasswordHasher] = None,
        codec: Optional[BinaryRecordCodec] = None
    ):
        """
        Initialize and load the credential store.

        When the loaded store is empty and bootstrapping is enabled, the
        configured default account is registered and reported through
        ``bootstrapped_account`` / ``bootstrap_notice``.

        Args:
            path: Snapshot file, defaults to the configured users file
            auth_config: Password rules and default account settings
            hasher: Password hasher, defaults to one using the configured iterations
            codec: Optional codec instance
        """
        config = get_config()
        super().__init__(path or config.env.users_file, codec)
        self.logger = get_auth_logger()

        self.auth_config = auth_config or config.auth
        self.hasher = hasher or PasswordHasher(self.auth_config.hash_iterations)
        self.min_password_length = self.auth_config.min_password_length
        # Unknown usernames are checked against this so every login pays for one hash
        self._unknown_user_token = self.hasher.hash(os.urandom(16).hex())

        self._current_user: Optional[str] = None
        self.bootstrapped_account: Optional[str] = None

        self.load()

        if self.is_empty() and self.auth_config.bootstrap_default_account:
            self._bootstrap_default_account()

    def _encode_record(self, stream: BinaryIO, record: CredentialRecord):
        self.codec.encode_credential(stream, record)

    def _decode_record(self, stream: BinaryIO) -> CredentialRecord:
        return self.codec.decode_credential(stream)

    def _key(self, record: CredentialRecord) -> str:
        return record.username

    def _bootstrap_default_account(self):
        username = self.auth_config.default_username
        try:
            self.register(username, self.auth_config.default_password)
        except (EmptyFieldError, WeakPasswordError) as e:
            raise ConfigurationError(
                f"Default account cannot be created: {e.message}",
                details={"username": username}
            )

        self.bootstrapped_account = username
        self.logger.warning(
            f"No users found; created development default account '{username}'. "
            "Change or disable it before any real use."
        )

    @property
    def bootstrap_notice(self) -> Optional[str]:
        """Informational message describing the default account, if one was created."""
        if not self.bootstrapped_account:
            return None
        return (
            f"Default account created (username: {self.bootstrapped_account}, "
            f"password: {self.auth_config.default_password}). "
            "This is a development convenience; register your own account."
        )

    @property
    def current_user(self) -> Optional[str]:
        return self._current_user

    @property
    def is_logged_in(self) -> bool:
        return self._current_user is not None

    def register(self, username: str, password: str) -> CredentialRecord:
        """
        Register a new user and persist the store.

        Args:
            username: New unique username
            password: Plaintext password, hashed before storage

        Returns:
            The stored record

        Raises:
            EmptyFieldError: If username or password is empty
            DuplicateUserError: If the username is taken
            WeakPasswordError: If the password is too short
        """
        if not username or not password:
            raise EmptyFieldError("Username and password cannot be empty")

        if username in self._records:
            raise DuplicateUserError("Username already exists", details={"username": username})

        if len(password) < self.min_password_length:
            raise WeakPasswordError(
                f"Password must be at least {self.min_password_length} characters long",
                details={"min_length": self.min_password_length}
            )

        record = CredentialRecord(username=username, password_token=self.hasher.hash(password))
        records = dict(self._records)
        records[username] = record
        self._commit(records)

        self.logger.info(f"Registered user {username}")
        return record

    def login(self, username: str, password: str) -> str:
        """
        Authenticate and start a session.

        Unknown users and wrong passwords fail identically.

        Returns:
            The logged-in username

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        record = self._records.get(username)
        token = record.password_token if record is not None else self._unknown_user_token
        if not self.hasher.verify(password, token) or record is None:
            self.logger.warning("Failed login attempt")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        self._current_user = username
        self.logger.info(f"User {username} logged in")
        return username

    def logout(self) -> Optional[str]:
        """End the session if there is one; returns the user that was logged out."""
        username = self._current_user
        if username is not None:
            self._current_user = None
            self.logger.info(f"User {username} logged out")
        return username

    def usernames(self) -> List[str]:
        """Registered usernames in sorted order."""
        return sorted(self._records)

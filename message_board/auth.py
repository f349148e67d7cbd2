"""
Static credential table and the login check against it.
"""

import hmac
import logging
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


# Pre-created accounts. Read-only for the life of the process.
USERS: Mapping[str, str] = MappingProxyType({
    "Administrator": "Pwd&1234",
    "Super admin": "Pwd&1234",
    "User A": "Pwd&1234",
    "User B": "Pwd&1234",
})


class CredentialStore:
    """Looks up plaintext username/password pairs in a fixed mapping."""

    def __init__(self, users: Mapping[str, str] = USERS):
        self._users = users

    def verify(self, username: Optional[str], password: Optional[str]) -> bool:
        """
        Check a username/password pair.

        Args:
            username: Supplied username (None if absent from the request)
            password: Supplied password (None if absent from the request)

        Returns:
            True only if the username exists and the password matches exactly
        """
        logger.debug(f"Verifying credentials for username: {username!r}")

        if not isinstance(username, str) or not isinstance(password, str):
            logger.info("Credential verification: missing username or password")
            return False

        expected = self._users.get(username)
        if expected is None:
            logger.info(f"Credential verification: unknown user {username!r}")
            return False

        # Compare as bytes so non-ASCII input is accepted
        is_valid = hmac.compare_digest(expected.encode("utf-8"), password.encode("utf-8"))
        logger.info(f"Credential verification for {username!r}: {'valid' if is_valid else 'invalid'}")

        return is_valid


def get_credential_store() -> CredentialStore:
    """Dependency returning the process-wide credential store."""
    return CredentialStore()

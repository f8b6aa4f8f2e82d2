"""Static operator password check."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Iterable

from engrave.store.errors import ValidationError

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """The supplied password is not in the configured list."""


def check_password(password: str | None, allowed: Iterable[str]) -> None:
    """Accept *password* if it matches any entry of *allowed*.

    Raises:
        ValidationError: If no password was supplied.
        AuthenticationError: If the password does not match.
    """
    if not password:
        raise ValidationError("password", "Password is required")

    candidate = password.encode("utf-8")
    # No early exit: every entry is compared.
    matched = False
    for entry in allowed:
        if hmac.compare_digest(candidate, entry.encode("utf-8")):
            matched = True
    if not matched:
        logger.warning("Rejected operator login")
        raise AuthenticationError("Incorrect Password")

"""Tests for the operator password check."""

from __future__ import annotations

import pytest

from engrave.auth import AuthenticationError, check_password
from engrave.store.errors import ValidationError


def test_accepts_listed_password():
    check_password("granite", ["marble", "granite"])


@pytest.mark.parametrize("password", [None, ""])
def test_missing_password(password):
    with pytest.raises(ValidationError, match="Password is required"):
        check_password(password, ["granite"])


def test_wrong_password():
    with pytest.raises(AuthenticationError):
        check_password("slate", ["granite"])


def test_empty_allow_list_rejects():
    with pytest.raises(AuthenticationError):
        check_password("granite", [])

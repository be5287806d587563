"""Authentication errors for the staff API."""

from __future__ import annotations

from rest_framework import exceptions  # type: ignore


class AuthError(exceptions.AuthenticationFailed):
    """Wrong credentials or a non-staff account. Rendered as 401."""

    default_detail = "Invalid login or password."
    default_code = "invalid_credentials"

"""Serializers for staff authentication."""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .exceptions import AuthError

logger = logging.getLogger(__name__)

User = get_user_model()


class AdminLoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        login = attrs.get("login", "").strip()
        password = attrs.get("password", "")

        # Find user by email or username
        lookup = {"email__iexact": login} if "@" in login else {"username": login}
        user = User.objects.filter(**lookup).first()

        if user is None or not user.check_password(password):
            logger.warning(f"Failed staff login for '{login}'")
            raise AuthError()
        if not user.is_active or not user.is_staff:
            logger.warning(f"Login refused for non-staff account '{login}'")
            raise AuthError("This account cannot access the administration API.")

        attrs["user"] = user
        return attrs

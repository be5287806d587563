"""
Custom Django model fields for sensitive data.
"""

import logging

from cryptography.fernet import InvalidToken
from django.db import models

from .encryption import decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedCharField(models.TextField):
    """
    Text field encrypted at rest.

    Values are encrypted before they reach the database and decrypted on
    load. Encrypted values cannot be filtered on.
    """

    description = "Encrypted text field"

    def from_db_value(self, value, expression, connection):
        if value is None or value == '':
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.error(f"Cannot decrypt {self.model.__name__}.{self.name}, was ENCRYPTION_KEY rotated?")
            raise

    def get_prep_value(self, value):
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)

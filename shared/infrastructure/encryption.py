"""
Encryption utilities

Symmetric (Fernet) encryption for applicant identity-document numbers
stored in the private booking record.
"""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@lru_cache(maxsize=4)
def _fernet_for(key: str) -> Fernet:
    # Arbitrary passphrases are stretched to the 32-byte urlsafe key Fernet expects.
    try:
        return Fernet(key.encode())
    except ValueError:
        return Fernet(base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest()))


def get_fernet() -> Fernet:
    key = getattr(settings, 'ENCRYPTION_KEY', None)
    if not key:
        raise ImproperlyConfigured(
            "ENCRYPTION_KEY is not configured. "
            "Generate one with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
        )
    return _fernet_for(key)


def encrypt_string(plaintext: str) -> str:
    if not plaintext:
        return ''
    return get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_string(encrypted: str) -> str:
    """Raises cryptography.fernet.InvalidToken if the key does not match."""
    if not encrypted:
        return ''
    return get_fernet().decrypt(encrypted.encode()).decode()

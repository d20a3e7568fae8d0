"""
Application-layer encryption for stored Patient resources.

The whole FHIR payload carries PHI (names, birth date, contact points), so
the SQL store keeps it only as Fernet ciphertext.
"""

import json
import logging
import os
from typing import Any

from cryptography.fernet import Fernet

logger = logging.getLogger(__name__)


class EncryptionService:
    """Wraps Fernet symmetric encryption for PHI payloads."""

    def __init__(self, key: str | None = None):
        raw_key = key or os.getenv("PHI_ENCRYPTION_KEY", "")
        if raw_key:
            self._fernet = Fernet(raw_key.encode() if isinstance(raw_key, str) else raw_key)
        else:
            # Data written with a generated key is unreadable after a restart;
            # production keys must come from the environment / secrets manager.
            logger.warning("PHI_ENCRYPTION_KEY not set; using an ephemeral key")
            self._fernet = Fernet(Fernet.generate_key())

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string and return base64-encoded ciphertext."""
        if not plaintext:
            return ""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt base64-encoded ciphertext back to plaintext."""
        if not ciphertext:
            return ""
        return self._fernet.decrypt(ciphertext.encode()).decode()

    def encrypt_json(self, payload: dict[str, Any]) -> str:
        return self.encrypt(json.dumps(payload, ensure_ascii=False, separators=(",", ":")))

    def decrypt_json(self, ciphertext: str) -> dict[str, Any]:
        return json.loads(self.decrypt(ciphertext))

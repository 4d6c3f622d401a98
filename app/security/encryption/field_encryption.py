"""
AES-256-GCM encryption of JSON records into storable envelopes.

An envelope is the triple ``(iv, tag, ciphertext)``, each base64 text, produced
by a single :func:`encrypt` call. The key is always passed in explicitly;
:func:`get_field_encryptor` binds the configured key once for the app.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.config import settings
from app.utils.error_handler import ConfigurationError, FormatError, IntegrityError
from app.utils.logger import get_logger

logger = get_logger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

ENVELOPE_FIELDS = ("iv", "tag", "ciphertext")


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Persisted form of one encrypted record."""

    iv: str
    tag: str
    ciphertext: str

    def to_dict(self) -> Dict[str, str]:
        return {"iv": self.iv, "tag": self.tag, "ciphertext": self.ciphertext}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EncryptedEnvelope":
        if not isinstance(data, Mapping):
            raise FormatError(
                "Envelope must be a mapping",
                technical_details={"envelope_type": type(data).__name__},
            )
        missing = [name for name in ENVELOPE_FIELDS if not isinstance(data.get(name), str)]
        if missing:
            raise FormatError(
                "Envelope is missing fields",
                technical_details={"missing": missing},
            )
        return cls(iv=data["iv"], tag=data["tag"], ciphertext=data["ciphertext"])


EnvelopeLike = Union[EncryptedEnvelope, Mapping[str, Any]]


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatError(
            f"Envelope field '{field}' is not valid base64",
            technical_details={"field": field},
        ) from exc


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        size = len(key) if isinstance(key, (bytes, bytearray)) else None
        raise ConfigurationError(
            f"Field encryption key must be exactly {KEY_SIZE} bytes",
            technical_details={"key_length": size},
        )
    return bytes(key)


def load_key(encoded: Optional[str]) -> bytes:
    """
    Decode a base64 key from configuration.

    Raises :class:`ConfigurationError` when the value is missing, is not
    base64, or does not decode to exactly 32 bytes.
    """
    if encoded is None or not encoded.strip():
        raise ConfigurationError("FIELD_ENCRYPTION_KEY is not set")
    try:
        key = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("FIELD_ENCRYPTION_KEY is not valid base64") from exc
    return _check_key(key)


def generate_key() -> str:
    """Return a fresh random key, base64-encoded, suitable for configuration."""
    return _b64encode(os.urandom(KEY_SIZE))


def encrypt(record: Any, key: bytes) -> EncryptedEnvelope:
    """Encrypt a JSON-serializable ``record`` under ``key`` with a fresh nonce."""
    aesgcm = AESGCM(_check_key(key))
    try:
        plaintext = json.dumps(
            record, ensure_ascii=False, separators=(",", ":"), allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise FormatError(
            "Record is not JSON-serializable",
            technical_details={"record_type": type(record).__name__},
        ) from exc

    iv = os.urandom(NONCE_SIZE)
    # AESGCM appends the tag to the ciphertext
    sealed = aesgcm.encrypt(iv, plaintext, None)
    return EncryptedEnvelope(
        iv=_b64encode(iv),
        tag=_b64encode(sealed[-TAG_SIZE:]),
        ciphertext=_b64encode(sealed[:-TAG_SIZE]),
    )


def decrypt(envelope: EnvelopeLike, key: bytes) -> Any:
    """
    Verify and decrypt ``envelope`` under ``key``, returning the record.

    Raises:
        ConfigurationError: ``key`` is not 32 bytes.
        FormatError: malformed base64, wrong nonce/tag size, or non-JSON plaintext.
        IntegrityError: the authentication tag does not verify.
    """
    aesgcm = AESGCM(_check_key(key))
    if not isinstance(envelope, EncryptedEnvelope):
        envelope = EncryptedEnvelope.from_dict(envelope)

    iv = _b64decode(envelope.iv, "iv")
    tag = _b64decode(envelope.tag, "tag")
    ciphertext = _b64decode(envelope.ciphertext, "ciphertext")
    if len(iv) != NONCE_SIZE:
        raise FormatError(
            f"Envelope iv must be {NONCE_SIZE} bytes",
            technical_details={"iv_length": len(iv)},
        )
    if len(tag) != TAG_SIZE:
        raise FormatError(
            f"Envelope tag must be {TAG_SIZE} bytes",
            technical_details={"tag_length": len(tag)},
        )

    try:
        plaintext = aesgcm.decrypt(iv, ciphertext + tag, None)
    except InvalidTag as exc:
        raise IntegrityError() from exc

    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FormatError("Decrypted payload is not valid JSON") from exc


class FieldEncryptor:
    """
    AES-256-GCM envelope encryption bound to one key.

    The key is validated on construction, so a misconfigured key fails before
    any record is touched. Instances hold no mutable state and can be shared.
    """

    def __init__(self, key: bytes) -> None:
        self._key = _check_key(key)

    @classmethod
    def from_base64(cls, encoded: Optional[str]) -> "FieldEncryptor":
        return cls(load_key(encoded))

    def encrypt(self, record: Any) -> EncryptedEnvelope:
        return encrypt(record, self._key)

    def decrypt(self, envelope: EnvelopeLike) -> Any:
        return decrypt(envelope, self._key)

    def __repr__(self) -> str:
        return "FieldEncryptor(key=***)"


@lru_cache(maxsize=1)
def _encryptor_for(encoded: Optional[str]) -> FieldEncryptor:
    encryptor = FieldEncryptor.from_base64(encoded)
    logger.info("Field encryption key loaded")
    return encryptor


def get_field_encryptor() -> FieldEncryptor:
    """Encryptor for ``settings.FIELD_ENCRYPTION_KEY``; cached per key value."""
    return _encryptor_for(settings.FIELD_ENCRYPTION_KEY)

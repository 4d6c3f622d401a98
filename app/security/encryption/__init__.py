from .field_encryption import (
    EncryptedEnvelope,
    FieldEncryptor,
    decrypt,
    encrypt,
    generate_key,
    get_field_encryptor,
    load_key,
)

__all__ = [
    "EncryptedEnvelope",
    "FieldEncryptor",
    "decrypt",
    "encrypt",
    "generate_key",
    "get_field_encryptor",
    "load_key",
]

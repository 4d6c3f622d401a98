#!/usr/bin/env python3
"""
Prints a fresh FIELD_ENCRYPTION_KEY value (32 random bytes, base64).
"""
from app.security.encryption.field_encryption import generate_key

if __name__ == "__main__":
    print(f"FIELD_ENCRYPTION_KEY={generate_key()}")

"""
Security package: auth, field encryption, access logging, response headers.

Uses structlog for logging. Encryption keys are passed explicitly; the only
process-wide holder is the cached encryptor built from settings.
"""

#!/usr/bin/env python3
"""
Generates a JWT for a given user id.
"""
import sys

from app.security.auth.jwt_handler import get_jwt_handler


def generate_token(user_id: str):
    """
    Prints a bearer token whose subject is ``user_id``.
    """
    if not user_id.isdigit():
        print("user_id must be a numeric user id")
        sys.exit(1)
    print(get_jwt_handler().create_token(subject=user_id))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/generate_token.py <user_id>")
        sys.exit(1)
    generate_token(sys.argv[1])

# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Password hashing helpers."""

from werkzeug.security import check_password_hash, generate_password_hash

# Prefixes of the salted formats produced by werkzeug
SUPPORTED_HASH_PREFIXES = ("scrypt:", "pbkdf2:")


def get_password_hash(password: str) -> str:
    """Hash a password with a salted key derivation function."""
    return generate_password_hash(password)


def is_supported_hash(hashed_password: str | None) -> bool:
    """Check whether a stored value is a salted hash this module can verify."""
    return bool(hashed_password) and hashed_password.startswith(SUPPORTED_HASH_PREFIXES)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against a stored hash.

    Values that are not salted hashes (plain text, base64, ...) never match.
    """
    if not is_supported_hash(hashed_password):
        return False
    return check_password_hash(hashed_password, plain_password)

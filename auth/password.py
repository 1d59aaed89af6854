"""
Password hashing and verification.

bcrypt with automatic salting. The work factor comes from
``config.bcrypt_rounds`` (env var: ``BCRYPT_ROUNDS``); hashes made
with a different cost are flagged by :func:`needs_rehash` so login
can upgrade them in place.
"""

from __future__ import annotations

import bcrypt

from config.settings import config


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of ``password`` against a bcrypt hash; False on malformed hashes."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False


def hash_rounds(password_hash: str) -> int | None:
    """Cost factor encoded in a ``$2b$NN$...`` hash, or None if unparseable."""
    # bcrypt layout: "" $ "2b" $ "NN" $ 22-char salt + 31-char digest
    parts = password_hash.split("$")
    if len(parts) < 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


def needs_rehash(password_hash: str) -> bool:
    return hash_rounds(password_hash) != config.bcrypt_rounds

"""Password Hashing — bcrypt hashes stored as the library's modular-crypt string.

Invariants:
    - PURE apart from salt generation
    - verify_password never raises on malformed stored values; it returns False
    - Both functions are CPU-bound: async callers run them in a worker thread
"""

import bcrypt

# bcrypt only reads the first 72 bytes of a password
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), hashed_password.encode("utf-8"))
    except ValueError:
        return False

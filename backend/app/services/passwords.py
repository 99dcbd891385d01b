"""
SentenceBoard Backend - Password Hasher
=========================================

What:  One-way salted hashing and verification of local passwords.
How:   argon2id through argon2-cffi. The encoded hash carries its own salt
       and parameters, so only the single string is stored.

Hashing is CPU-bound (tens of milliseconds per call). The async variants
run it in Starlette's threadpool so other requests keep flowing.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from starlette.concurrency import run_in_threadpool

_PH = PasswordHasher()


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Password must not be empty")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    """Constant-time comparison; False for any mismatch or malformed hash."""
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


async def hash_password_async(plain: str) -> str:
    return await run_in_threadpool(hash_password, plain)


async def verify_password_async(hash_value: str, plain: str) -> bool:
    return await run_in_threadpool(verify_password, hash_value, plain)

"""
SentenceBoard Backend - Password Hasher Unit Tests
====================================================

What:  argon2 hashing and verification helpers.

What we test:
    ✅ Hashes are salted (same input, different output) and never the plain text
    ✅ Correct password verifies, wrong or empty one does not
    ✅ Malformed stored hashes fail closed instead of raising
    ✅ Async wrappers give the same answers
"""

import pytest

from app.services.passwords import (
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)


class TestHashPassword:

    def test_hash_is_argon2_and_not_plain(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert hashed.startswith("$argon2")

    def test_hash_is_salted(self):
        assert hash_password("same-password") != hash_password("same-password")

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")


class TestVerifyPassword:

    def setup_method(self):
        self.hashed = hash_password("open sesame")

    def test_correct_password(self):
        assert verify_password(self.hashed, "open sesame") is True

    def test_wrong_password(self):
        assert verify_password(self.hashed, "open sesame!") is False

    def test_empty_inputs(self):
        assert verify_password(self.hashed, "") is False
        assert verify_password("", "open sesame") is False

    def test_malformed_hash_fails_closed(self):
        assert verify_password("not-a-hash", "open sesame") is False

    @pytest.mark.asyncio
    async def test_async_round_trip(self):
        hashed = await hash_password_async("async secret")
        assert await verify_password_async(hashed, "async secret") is True
        assert await verify_password_async(hashed, "other") is False

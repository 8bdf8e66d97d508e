"""
Todo Cards Backend — Password Hashing and Token Tests
=======================================================
"""

import pytest

from app.security import (
    hash_password,
    new_session_token,
    parse_bearer_token,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_verifies_with_same_password(self):
        stored = hash_password("correct horse")
        assert verify_password("correct horse", stored)

    def test_hash_rejects_other_password(self):
        stored = hash_password("correct horse")
        assert not verify_password("battery staple", stored)

    def test_hash_is_salted(self):
        first = hash_password("same password")
        second = hash_password("same password")
        assert first != second
        assert verify_password("same password", first)
        assert verify_password("same password", second)

    def test_hash_is_argon2id_phc_string(self):
        stored = hash_password("pw123456")
        assert stored.startswith("$argon2id$v=19$")
        assert "pw123456" not in stored
        assert len(stored) <= 255

    @pytest.mark.parametrize("stored", [
        "",
        "not-a-hash",
        "pbkdf2_sha256$1000$abcd$abcd",
        "$argon2id$v=19$m=65536,t=3,p=4$garbage",
    ])
    def test_malformed_hash_never_matches(self, stored):
        assert not verify_password("anything", stored)


class TestSessionTokens:

    def test_tokens_are_unique_and_fit_column(self):
        tokens = {new_session_token() for _ in range(50)}
        assert len(tokens) == 50
        assert all(len(t) <= 64 for t in tokens)

    @pytest.mark.parametrize("header, expected", [
        (None, ""),
        ("", ""),
        ("Bearer abc123", "abc123"),
        ("bearer   abc123 ", "abc123"),
        ("abc123", "abc123"),
    ])
    def test_parse_bearer_token(self, header, expected):
        assert parse_bearer_token(header) == expected

"""Tests for argon2 password hashing."""

from latchkey.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)


def test_hash_is_not_plaintext():
    hashed = hash_password("Password123!")
    assert hashed != "Password123!"
    assert hashed.startswith("$argon2")


def test_hashes_are_salted():
    assert hash_password("Password123!") != hash_password("Password123!")


def test_verify_correct_and_wrong_password():
    hashed = hash_password("Password123!")
    assert verify_password("Password123!", hashed) is True
    assert verify_password("wrong-password", hashed) is False


def test_verify_garbage_hash_returns_false():
    assert verify_password("Password123!", "not-a-hash") is False


def test_dummy_hash_never_matches_common_input():
    assert verify_password("", DUMMY_PASSWORD_HASH) is False
    assert verify_password("Password123!", DUMMY_PASSWORD_HASH) is False


def test_fresh_hash_does_not_need_rehash():
    assert needs_rehash(hash_password("Password123!")) is False

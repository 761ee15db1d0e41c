"""Tests for bcrypt password hashing."""

from fypms.auth.password import hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("pw123")
    assert hashed != "pw123"
    assert hashed.startswith("$2b$")


def test_same_password_hashes_differently():
    assert hash_password("pw123") != hash_password("pw123")


def test_verify_correct_and_wrong_password():
    hashed = hash_password("pw123")
    assert verify_password("pw123", hashed) is True
    assert verify_password("pw124", hashed) is False


def test_rounds_come_from_settings():
    # conftest sets FYPMS_BCRYPT_ROUNDS=4
    assert hash_password("x").startswith("$2b$04$")
    assert hash_password("x", rounds=5).startswith("$2b$05$")


def test_corrupt_hash_never_verifies():
    assert verify_password("pw123", "not-a-bcrypt-hash") is False

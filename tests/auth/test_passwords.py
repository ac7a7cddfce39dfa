"""Tests for bcrypt password helpers."""

from auth.passwords import burn_verify, generate_password, hash_password, verify_password


class TestHashing:
    def test_verify_matches(self):
        hashed = hash_password("s3cret-pass", rounds=4)
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("s3cret-pasS", hashed)

    def test_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_cost_factor_in_hash(self):
        assert hash_password("pw", rounds=5).startswith("$2b$05$")

    def test_default_cost_is_12(self):
        assert hash_password("pw").startswith("$2b$12$")

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_long_passwords_truncated_consistently(self):
        long_password = "x" * 100
        hashed = hash_password(long_password, rounds=4)
        assert verify_password(long_password, hashed)
        assert verify_password("x" * 72, hashed)

    def test_burn_verify_returns_nothing(self):
        assert burn_verify("whatever") is None


class TestGeneratePassword:
    def test_length(self):
        assert len(generate_password()) == 16
        assert len(generate_password(24)) == 24

    def test_unique(self):
        assert generate_password() != generate_password()

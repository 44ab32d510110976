"""Tests for password hashing and lockout policy."""

import pytest

from ctrlaltvibe.core.security import (
    calculate_lockout_duration,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """hash_password() / verify_password() tests."""

    def test_roundtrip(self) -> None:
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$argon2id$")
        assert verify_password("secret123", hashed) is True

    def test_wrong_password(self) -> None:
        """Mismatch returns False instead of raising."""
        hashed = hash_password("secret123")
        assert verify_password("secret124", hashed) is False

    def test_salted(self) -> None:
        """Same password hashes differently each time."""
        assert hash_password("secret123") != hash_password("secret123")


class TestLockoutDuration:
    """calculate_lockout_duration() tests (defaults: threshold 5, base 30s, max 1800s)."""

    @pytest.mark.parametrize("attempts", [0, 1, 4])
    def test_below_threshold(self, attempts: int) -> None:
        assert calculate_lockout_duration(attempts) == 0

    @pytest.mark.parametrize(
        ("attempts", "expected"),
        [(5, 30), (6, 60), (7, 120), (8, 240), (10, 960)],
    )
    def test_exponential_backoff(self, attempts: int, expected: int) -> None:
        assert calculate_lockout_duration(attempts) == expected

    def test_capped(self) -> None:
        """Duration never exceeds 30 minutes."""
        assert calculate_lockout_duration(11) == 1800
        assert calculate_lockout_duration(50) == 1800

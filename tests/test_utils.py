"""
Utility tests: instant parsing, money, passwords, tokens.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from salesdesk.utils.dates import parse_instant
from salesdesk.utils.money import round_half_up, safe_format, to_decimal


# ── Dates ─────────────────────────────────────────────────


class TestParseInstant:
    def test_iso_with_z(self):
        assert parse_instant("2026-10-19T15:00:00Z") == datetime(2026, 10, 19, 15, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        result = parse_instant("2026-10-19T11:00:00-04:00")
        assert result == datetime(2026, 10, 19, 15, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_naive_taken_as_utc(self):
        assert parse_instant(datetime(2026, 1, 1, 9)) == datetime(2026, 1, 1, 9, tzinfo=timezone.utc)

    def test_date_is_midnight(self):
        assert parse_instant(date(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_bad_values(self):
        assert parse_instant(None) is None
        assert parse_instant("") is None
        assert parse_instant("tomorrow") is None
        assert parse_instant(12345) is None


# ── Money ─────────────────────────────────────────────────


class TestMoney:
    def test_to_decimal(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")
        assert to_decimal(float("nan")) == Decimal("0")
        assert to_decimal(Decimal("NaN")) == Decimal("0")

    def test_round_half_up(self):
        assert round_half_up(Decimal("2.5")) == Decimal("3")
        assert round_half_up(Decimal("0.25"), 1) == Decimal("0.3")

    def test_safe_format(self):
        assert safe_format(Decimal("1234")) == "$1,234"
        assert safe_format(Decimal("1234.50")) == "$1,234.50"
        assert safe_format(None) == "$0"


# ── Passwords and tokens ──────────────────────────────────


def test_password_hashing():
    from salesdesk.utils.password import hash_password, verify_password

    hashed = hash_password("test_password_123")

    assert hashed != "test_password_123"
    assert verify_password("test_password_123", hashed)
    assert not verify_password("wrong_password", hashed)
    assert not verify_password("anything", "not-a-hash")


class TestTokens:
    def test_round_trip(self):
        from salesdesk.auth.jwt import create_access_token, verify_token

        token = create_access_token("user-1", True)
        assert verify_token(token) == {"user_id": "user-1", "is_admin": True}

    def test_expired_token_rejected(self):
        from salesdesk.auth.jwt import create_access_token, verify_token

        token = create_access_token("user-1", False, expires_delta=timedelta(seconds=-1))
        assert verify_token(token) is None

    def test_garbage_rejected(self):
        from salesdesk.auth.jwt import verify_token

        assert verify_token("not.a.token") is None

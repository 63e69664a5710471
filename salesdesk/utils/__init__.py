"""Utility functions."""

from salesdesk.utils.audit import log_action
from salesdesk.utils.dates import parse_instant
from salesdesk.utils.money import safe_format, to_decimal
from salesdesk.utils.password import hash_password, verify_password

__all__ = [
    "hash_password",
    "verify_password",
    "log_action",
    "parse_instant",
    "to_decimal",
    "safe_format",
]

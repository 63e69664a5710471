"""
Commission resolution for sales reps.

Rules:
- A manual commission_amount on the lead always wins
- Leads that are not Closed earn nothing yet
- A lead whose owner is unknown earns nothing
- Otherwise the owner's commission rules decide, in one of two modes:
    FLAT_BASE         every deal earns the threshold-0 (base) amount
    TIERED_BY_VOLUME  deal number n earns the amount of the rule with
                      the highest threshold below n
- No usable rule falls back to DEFAULT_COMMISSION per deal
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from salesdesk.models.lead import LeadStatus
from salesdesk.utils.dates import parse_instant
from salesdesk.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION = Decimal("249")

_NO_DATE = datetime.max.replace(tzinfo=timezone.utc)


class CommissionMode(str, Enum):
    """How rules beyond the base rate are interpreted."""
    FLAT_BASE = "flat_base"
    TIERED_BY_VOLUME = "tiered_by_volume"


class CommissionRuleError(ValueError):
    """A commission rule set failed validation."""


def is_closed(lead: Any) -> bool:
    return getattr(lead, "status", None) == LeadStatus.CLOSED


def is_signed(lead: Any) -> bool:
    """Closed with a known signup date; only these count toward rep totals."""
    return is_closed(lead) and parse_instant(getattr(lead, "signup_date", None)) is not None


def rules_of(user: Any) -> list:
    return list(getattr(user, "commission_rules", None) or [])


def base_rule_amount(rules: Sequence[Any]) -> Optional[Decimal]:
    """Amount of the threshold-0 rule, or None if there is none."""
    for rule in rules:
        if rule.threshold == 0:
            return to_decimal(rule.amount)
    return None


def tier_amount(rules: Sequence[Any], deal_number: int) -> Optional[Decimal]:
    """
    Per-deal amount for the owner's nth closed deal (1-based).

    Deal n falls in the band of the rule with the largest threshold
    strictly below n, so a rule with threshold 10 starts at deal 11.
    """
    candidates = [rule for rule in rules if rule.threshold < deal_number]
    if not candidates:
        return None
    return to_decimal(max(candidates, key=lambda rule: rule.threshold).amount)


def find_owner(owner_id: Any, users: Iterable[Any]) -> Optional[Any]:
    for user in users:
        if user.id == owner_id:
            return user
    return None


def resolve_commission(
    lead: Any,
    users: Iterable[Any],
    mode: CommissionMode = CommissionMode.FLAT_BASE,
    deal_number: int = 1,
    default_amount: Decimal = DEFAULT_COMMISSION,
) -> Decimal:
    """
    Commission earned on a single lead.

    Args:
        lead: Lead (or any object with the same attributes)
        users: Candidate owners with their commission_rules
        mode: Rule interpretation, see module docstring
        deal_number: Position of this deal among the owner's closed deals
            for the period; only used in TIERED_BY_VOLUME mode
        default_amount: Fallback when no rule applies

    Returns:
        Commission as a Decimal, never None
    """
    override = getattr(lead, "commission_amount", None)
    if override is not None:
        return to_decimal(override)

    if not is_closed(lead):
        return ZERO

    owner = find_owner(getattr(lead, "owner_id", None), users)
    if owner is None:
        logger.debug(f"Lead {getattr(lead, 'id', '?')} has no known owner, commission is 0")
        return ZERO

    rules = rules_of(owner)
    if mode == CommissionMode.TIERED_BY_VOLUME:
        amount = tier_amount(rules, max(deal_number, 1))
    else:
        amount = base_rule_amount(rules)

    return amount if amount is not None else to_decimal(default_amount)


def tiered_commission_total(
    rules: Sequence[Any],
    closed_deals: int,
    default_amount: Decimal = DEFAULT_COMMISSION,
) -> Decimal:
    """Total for N closed deals paid in volume bands, ignoring overrides."""
    total = ZERO
    for deal_number in range(1, closed_deals + 1):
        amount = tier_amount(rules, deal_number)
        total += amount if amount is not None else to_decimal(default_amount)
    return total


def close_order_key(lead: Any):
    """Sort closed deals oldest first by signup date, then close date."""
    signup = parse_instant(getattr(lead, "signup_date", None))
    closed = parse_instant(getattr(lead, "closed_at", None))
    return (signup or _NO_DATE, closed or _NO_DATE, str(getattr(lead, "id", "")))


def owner_commission_total(
    leads: Iterable[Any],
    owner: Any,
    mode: CommissionMode = CommissionMode.TIERED_BY_VOLUME,
    default_amount: Decimal = DEFAULT_COMMISSION,
) -> Decimal:
    """
    Sum of commissions over the owner's closed leads.

    Deals are numbered in signup order so tiers are reached in the
    order the deals were won. Per-lead overrides still take precedence
    but keep their place in the numbering.
    """
    closed = sorted(
        (lead for lead in leads if getattr(lead, "owner_id", None) == owner.id and is_closed(lead)),
        key=close_order_key,
    )
    if mode == CommissionMode.TIERED_BY_VOLUME and all(
        getattr(lead, "commission_amount", None) is None for lead in closed
    ):
        return tiered_commission_total(rules_of(owner), len(closed), default_amount)

    return sum(
        (
            resolve_commission(lead, [owner], mode, deal_number=n, default_amount=default_amount)
            for n, lead in enumerate(closed, start=1)
        ),
        ZERO,
    )


def validate_commission_rules(rules: Sequence[Any]) -> List[Any]:
    """
    Check a rule set before saving it on a user.

    Raises:
        CommissionRuleError: empty set, no threshold-0 base rule,
            negative values, or a threshold used twice

    Returns:
        The rules sorted ascending by threshold
    """
    if not rules:
        raise CommissionRuleError("At least one commission rule is required")

    seen = set()
    for rule in rules:
        if rule.threshold < 0:
            raise CommissionRuleError("Thresholds cannot be negative")
        if to_decimal(rule.amount) < 0:
            raise CommissionRuleError("Commission amounts cannot be negative")
        if rule.threshold in seen:
            raise CommissionRuleError(f"Duplicate threshold {rule.threshold}")
        seen.add(rule.threshold)

    if 0 not in seen:
        raise CommissionRuleError("A base rule with threshold 0 is required")

    return sorted(rules, key=lambda rule: rule.threshold)

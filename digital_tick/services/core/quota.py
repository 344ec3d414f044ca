"""Quota policy and plan table."""

from dataclasses import dataclass

from digital_tick.config import Settings
from digital_tick.types.usage import Allowed, Denied, QuotaDecision, Tier

FREE_PLAN = "free"
PLUS_PLAN = "plus"
PLANS = (FREE_PLAN, PLUS_PLAN)


@dataclass(frozen=True)
class PlanPolicy:
    """What a plan is entitled to."""

    name: str
    tier: Tier
    monthly_limit: int | None
    max_output_tokens: int
    allow_images: bool
    keep_history: bool
    label: str


def get_plan_policy(plan: str, settings: Settings) -> PlanPolicy:
    """
    Look up the policy for a plan name.

    Raises:
        ValueError: If the plan is not one of PLANS
    """
    plan = (plan or "").strip().lower()
    if plan == FREE_PLAN:
        return PlanPolicy(
            name=FREE_PLAN,
            tier=Tier.METERED,
            monthly_limit=settings.free_monthly_limit,
            max_output_tokens=settings.free_max_output_tokens,
            allow_images=False,
            keep_history=False,
            label="Free (Basic)",
        )
    if plan == PLUS_PLAN:
        return PlanPolicy(
            name=PLUS_PLAN,
            tier=Tier.UNLIMITED,
            monthly_limit=None,
            max_output_tokens=settings.plus_max_output_tokens,
            allow_images=True,
            keep_history=True,
            label="Plus (Expert)",
        )
    raise ValueError(f"Unknown plan '{plan}', expected one of: {list(PLANS)}")


def decide(tier: Tier, used_count: int, limit: int | None) -> QuotaDecision:
    """
    Decide whether one more billable request is admissible.

    Only decides; the usage ledger does the increment. `remaining` and `used`
    on an Allowed decision describe the state after this request is counted.
    """
    if tier == Tier.UNLIMITED:
        return Allowed()

    if limit is None:
        raise ValueError("metered tier requires a limit")

    if used_count >= limit:
        return Denied(limit=limit, used=used_count)

    return Allowed(remaining=limit - used_count - 1, used=used_count + 1)

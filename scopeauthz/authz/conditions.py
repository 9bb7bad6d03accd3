"""Conditional permission evaluation.

Raw condition maps are parsed into a closed set of condition types and
evaluated with AND logic against a caller-supplied context:

- owner: context["userId"] must be the principal's id
- timeRange: now must fall within [start, end]
- allowedIps: context["clientIp"] must be in the list
- environment: context["environment"] must match exactly

Unrecognized keys parse to UnknownCondition and always pass, so newer
condition types can be attached to permissions before this engine
understands them.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scopeauthz.auth.models import Principal


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Condition(BaseModel):
    """Base class for parsed conditions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: ClassVar[str] = ""

    @property
    def name(self) -> str:
        return self.key


class OwnerCondition(Condition):
    """The caller must be acting on their own resource."""

    key: ClassVar[str] = "owner"


class TimeRangeCondition(Condition):
    """Access is limited to a time window. Bounds are inclusive."""

    key: ClassVar[str] = "timeRange"

    start: datetime | None = Field(default=None, description="Window start (unbounded if None)")
    end: datetime | None = Field(default=None, description="Window end (unbounded if None)")

    @field_validator("start", "end")
    @classmethod
    def _naive_is_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return _as_utc(value)


class IpAllowlistCondition(Condition):
    """The client IP must be one of the allowed addresses."""

    key: ClassVar[str] = "allowedIps"

    allowed_ips: list[str] = Field(alias="allowedIps")


class EnvironmentCondition(Condition):
    """The request must come from a specific deployment environment."""

    key: ClassVar[str] = "environment"

    environment: str


class UnknownCondition(Condition):
    """A condition key this engine does not understand."""

    raw_key: str
    value: Any = None

    @property
    def name(self) -> str:
        return self.raw_key


def parse_conditions(raw: Mapping[str, Any]) -> list[Condition]:
    """Parse a raw condition map into condition objects.

    Falsy owner, timeRange and environment values are no-ops and produce
    nothing. Malformed values raise pydantic.ValidationError.
    """
    conditions: list[Condition] = []
    for key, value in raw.items():
        if key == OwnerCondition.key:
            if value:
                conditions.append(OwnerCondition())
        elif key == TimeRangeCondition.key:
            if value:
                conditions.append(TimeRangeCondition.model_validate(value))
        elif key == IpAllowlistCondition.key:
            if value is not None:
                conditions.append(IpAllowlistCondition(allowedIps=value))
        elif key == EnvironmentCondition.key:
            if value:
                conditions.append(EnvironmentCondition(environment=value))
        else:
            conditions.append(UnknownCondition(raw_key=key, value=value))
    return conditions


class ConditionEvaluator:
    """Evaluates parsed conditions against a request context.

    Usage:
        evaluator = ConditionEvaluator()
        failed = evaluator.evaluate(permission.conditions, context, principal)
        if failed is not None:
            # Denied by failed.name
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock

    def evaluate(
        self,
        conditions: Mapping[str, Any],
        context: Mapping[str, Any],
        principal: Principal,
    ) -> Condition | None:
        """Return the first failing condition, or None if all pass."""
        for condition in parse_conditions(conditions):
            if not self.check(condition, context, principal):
                return condition
        return None

    def check(
        self,
        condition: Condition,
        context: Mapping[str, Any],
        principal: Principal,
    ) -> bool:
        """Check a single condition."""
        if isinstance(condition, OwnerCondition):
            user_id = context.get("userId")
            return not user_id or user_id == principal.id

        elif isinstance(condition, TimeRangeCondition):
            now = _as_utc(self.clock())
            if condition.start is not None and now < condition.start:
                return False
            if condition.end is not None and now > condition.end:
                return False
            return True

        elif isinstance(condition, IpAllowlistCondition):
            client_ip = context.get("clientIp")
            return not client_ip or client_ip in condition.allowed_ips

        elif isinstance(condition, EnvironmentCondition):
            environment = context.get("environment")
            return not environment or environment == condition.environment

        elif isinstance(condition, UnknownCondition):
            return True

        raise TypeError(f"Unsupported condition type: {type(condition).__name__}")

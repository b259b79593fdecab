# delivery_api/services/ownership_service.py
"""
Ownership checks for mutating a delivery.

Pure functions over a delivery snapshot; the caller supplies the resolved
driver identity and the receipt existence flag. Decisions are returned,
``raise_for_decision`` turns a denial into the matching API error.
"""

from dataclasses import dataclass
from typing import Optional

from delivery_api.errors import ForbiddenError, PreconditionFailedError
from delivery_api.models.delivery import COMPLETED_STATUSES, KNOWN_STATUSES
from delivery_api.models.user import ROLE_ADMIN, ROLE_DRIVER, ROLE_SUPERVISOR
from delivery_api.services.identity_service import (
    DriverIdentity,
    actor_identity_ids,
    coerce_id,
)

FORBIDDEN = "FORBIDDEN"
PRECONDITION_FAILED = "PRECONDITION_FAILED"

MANAGER_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPERVISOR})


@dataclass(frozen=True)
class OwnershipDecision:
    allowed: bool
    reason_kind: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


ALLOW = OwnershipDecision(allowed=True)


def _deny(kind: str, code: str, message: str) -> OwnershipDecision:
    return OwnershipDecision(allowed=False, reason_kind=kind, error_code=code, message=message)


def is_completed(status: Optional[str]) -> bool:
    return (status or "").strip().upper() in COMPLETED_STATUSES


def owns_delivery(delivery, actor: dict, identity: Optional[DriverIdentity]) -> bool:
    """True when any of the actor's ids matches the delivery's driver or creator."""
    delivery_ids = {
        i
        for i in (coerce_id(delivery.driver_id), coerce_id(delivery.created_by_user_id))
        if i is not None
    }
    return bool(actor_identity_ids(actor, identity) & delivery_ids)


def can_delete(
    delivery,
    actor: dict,
    identity: Optional[DriverIdentity] = None,
    has_receipt: bool = False,
) -> OwnershipDecision:
    if is_completed(delivery.status):
        return _deny(
            PRECONDITION_FAILED,
            "DELIVERY_COMPLETED",
            "Completed deliveries cannot be deleted",
        )
    if has_receipt:
        return _deny(
            PRECONDITION_FAILED,
            "RECEIPT_ATTACHED",
            "Remove the attached receipt before deleting this delivery",
        )

    role = actor.get("role")
    if role in MANAGER_ROLES:
        return ALLOW
    if role == ROLE_DRIVER:
        if owns_delivery(delivery, actor, identity):
            return ALLOW
        return _deny(FORBIDDEN, "NOT_YOUR_DELIVERY", "This delivery is not yours")
    return _deny(
        FORBIDDEN, "ROLE_NOT_ALLOWED", f"Role '{role}' cannot delete deliveries"
    )


def can_mutate_status(
    delivery,
    actor: dict,
    new_status: Optional[str],
    identity: Optional[DriverIdentity] = None,
) -> OwnershipDecision:
    normalized = (new_status or "").strip().upper()
    if normalized not in KNOWN_STATUSES:
        return _deny(
            PRECONDITION_FAILED,
            "INVALID_STATUS",
            f"Unknown delivery status '{new_status}'",
        )

    role = actor.get("role")
    if role in MANAGER_ROLES:
        return ALLOW
    if role == ROLE_DRIVER:
        if not owns_delivery(delivery, actor, identity):
            return _deny(FORBIDDEN, "NOT_YOUR_DELIVERY", "This delivery is not yours")
        if is_completed(delivery.status):
            return _deny(
                PRECONDITION_FAILED,
                "DELIVERY_COMPLETED",
                "Completed deliveries can only be changed by a supervisor",
            )
        return ALLOW
    return _deny(
        FORBIDDEN, "ROLE_NOT_ALLOWED", f"Role '{role}' cannot change delivery status"
    )


def raise_for_decision(decision: OwnershipDecision) -> None:
    if decision.allowed:
        return
    if decision.reason_kind == PRECONDITION_FAILED:
        raise PreconditionFailedError(decision.message, code=decision.error_code)
    raise ForbiddenError(decision.message, code=decision.error_code)

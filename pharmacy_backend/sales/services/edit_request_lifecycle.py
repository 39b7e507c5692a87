# sales/services/edit_request_lifecycle.py

"""
EDIT REQUEST STATUS RULES

A request is opened PENDING and decided exactly once:

    PENDING --approve--> APPROVED
    PENDING --reject---> REJECTED

Pure functions only; the service locks the row and persists the result.
"""

from sales.models import SaleEditRequest
from sales.services.exceptions import InvalidTransitionError

Status = SaleEditRequest.Status

# decision -> status it lands in
DECISIONS = {
    True: Status.APPROVED,
    False: Status.REJECTED,
}

OPEN_STATES = {Status.PENDING}


def can_transition(*, from_status: str, to_status: str) -> bool:
    return from_status in OPEN_STATES and to_status in DECISIONS.values()


def target_status_for(approved: bool) -> str:
    return DECISIONS[bool(approved)]


def validate_transition(*, edit_request: SaleEditRequest, target_status: str):
    if can_transition(from_status=edit_request.status, to_status=target_status):
        return

    if edit_request.status not in OPEN_STATES:
        raise InvalidTransitionError(
            f"Edit request {edit_request.id} was already {edit_request.status.lower()}"
        )
    raise InvalidTransitionError(f"Unknown edit request decision: {target_status}")

"""Project lifecycle graph.

Explicit status changes are checked against TRANSITIONS only. Progress updates
may move the status on their own; each of those steps names the single state
it starts from, so it always follows an edge of the same graph.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..core.constants import MAX_PROGRESS
from ..core.enums import ProjectStatus as S
from ..core.exceptions import InvalidTransitionError

TRANSITIONS: Mapping[S, frozenset[S]] = MappingProxyType(
    {
        S.DRAFT: frozenset({S.ESTIMATION_PREPARED}),
        S.ESTIMATION_PREPARED: frozenset({S.QUOTATION_SENT, S.ON_HOLD, S.CANCELLED}),
        S.QUOTATION_SENT: frozenset({S.QUOTATION_APPROVED, S.QUOTATION_REJECTED, S.ON_HOLD, S.CANCELLED}),
        S.QUOTATION_APPROVED: frozenset({S.LPO_RECEIVED, S.ON_HOLD, S.CANCELLED}),
        S.LPO_RECEIVED: frozenset({S.TEAM_ASSIGNED, S.ON_HOLD, S.CANCELLED}),
        S.TEAM_ASSIGNED: frozenset({S.WORK_STARTED, S.ON_HOLD}),
        S.WORK_STARTED: frozenset({S.IN_PROGRESS, S.ON_HOLD, S.CANCELLED}),
        S.IN_PROGRESS: frozenset({S.WORK_COMPLETED, S.ON_HOLD, S.CANCELLED}),
        S.WORK_COMPLETED: frozenset({S.QUALITY_CHECK, S.ON_HOLD}),
        S.QUALITY_CHECK: frozenset({S.CLIENT_HANDOVER, S.WORK_COMPLETED}),
        S.CLIENT_HANDOVER: frozenset({S.FINAL_INVOICE_SENT, S.ON_HOLD}),
        S.FINAL_INVOICE_SENT: frozenset({S.PAYMENT_RECEIVED, S.ON_HOLD}),
        S.PAYMENT_RECEIVED: frozenset({S.PROJECT_CLOSED}),
        S.ON_HOLD: frozenset({S.IN_PROGRESS, S.WORK_STARTED, S.CANCELLED}),
        S.CANCELLED: frozenset(),
        S.PROJECT_CLOSED: frozenset(),
        S.QUOTATION_REJECTED: frozenset(),
    }
)

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def allowed_targets(current: S) -> frozenset[S]:
    return TRANSITIONS.get(S(current), frozenset())


def can_transition(current: S, target: S) -> bool:
    return S(target) in allowed_targets(current)


def ensure_transition(current: S, target) -> S:
    """Return the target status if the edge exists, else raise InvalidTransitionError."""
    try:
        target = S(target)
    except ValueError:
        raise InvalidTransitionError(current, target)
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
    return target


def is_terminal(status: S) -> bool:
    return S(status) in TERMINAL_STATUSES


def status_after_progress(current: S, progress: int) -> S:
    """Status a project lands in once `progress` has been recorded.

    team_assigned -> work_started on any update, work_started -> in_progress
    once progress is above zero, in_progress -> work_completed at 100.
    """
    status = S(current)
    if status == S.TEAM_ASSIGNED:
        status = S.WORK_STARTED
    if status == S.WORK_STARTED and progress > 0:
        status = S.IN_PROGRESS
    if status == S.IN_PROGRESS and progress == MAX_PROGRESS:
        status = S.WORK_COMPLETED
    return status

from __future__ import annotations

import pytest

from src.fieldops.fieldops.core.enums import ProjectStatus as S
from src.fieldops.fieldops.core.exceptions import InvalidTransitionError
from src.fieldops.fieldops.projects import lifecycle


def test_every_status_has_an_entry():
    assert set(lifecycle.TRANSITIONS) == set(S)


def test_terminal_statuses():
    assert lifecycle.TERMINAL_STATUSES == {S.CANCELLED, S.PROJECT_CLOSED, S.QUOTATION_REJECTED}
    for s in lifecycle.TERMINAL_STATUSES:
        assert lifecycle.is_terminal(s)
    assert not lifecycle.is_terminal(S.ON_HOLD)


def test_ensure_transition_accepts_every_listed_edge():
    for current, targets in lifecycle.TRANSITIONS.items():
        for target in targets:
            assert lifecycle.ensure_transition(current, target.value) == target


def test_ensure_transition_rejects_every_pair_not_listed():
    for current in S:
        for target in S:
            if target in lifecycle.TRANSITIONS[current]:
                continue
            with pytest.raises(InvalidTransitionError) as exc:
                lifecycle.ensure_transition(current, target)
            assert exc.value.from_status == current


def test_unknown_target_is_an_invalid_transition():
    with pytest.raises(InvalidTransitionError):
        lifecycle.ensure_transition(S.DRAFT, "launched")


def test_on_hold_resumes_but_never_restarts_from_draft():
    assert lifecycle.can_transition(S.ON_HOLD, S.IN_PROGRESS)
    assert lifecycle.can_transition(S.ON_HOLD, S.WORK_STARTED)
    assert not lifecycle.can_transition(S.ON_HOLD, S.DRAFT)


def test_quality_check_can_send_work_back():
    assert lifecycle.can_transition(S.QUALITY_CHECK, S.WORK_COMPLETED)


@pytest.mark.parametrize(
    "current, progress, expected",
    [
        (S.TEAM_ASSIGNED, 0, S.WORK_STARTED),
        (S.TEAM_ASSIGNED, 30, S.IN_PROGRESS),
        (S.TEAM_ASSIGNED, 100, S.WORK_COMPLETED),
        (S.WORK_STARTED, 0, S.WORK_STARTED),
        (S.WORK_STARTED, 1, S.IN_PROGRESS),
        (S.IN_PROGRESS, 99, S.IN_PROGRESS),
        (S.IN_PROGRESS, 100, S.WORK_COMPLETED),
        (S.ON_HOLD, 100, S.ON_HOLD),
        (S.DRAFT, 50, S.DRAFT),
        (S.QUALITY_CHECK, 100, S.QUALITY_CHECK),
    ],
)
def test_status_after_progress(current, progress, expected):
    assert lifecycle.status_after_progress(current, progress) == expected


def test_status_after_progress_only_follows_graph_edges():
    chain = [S.TEAM_ASSIGNED, S.WORK_STARTED, S.IN_PROGRESS, S.WORK_COMPLETED]
    for current in S:
        for progress in (0, 1, 50, 100):
            after = lifecycle.status_after_progress(current, progress)
            if after == current:
                continue
            i, j = chain.index(current), chain.index(after)
            for a, b in zip(chain[i:j], chain[i + 1 : j + 1]):
                assert lifecycle.can_transition(a, b)

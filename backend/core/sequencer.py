"""Picks the assignment an annotator should work on next.

Sequence positions are written once when assignments are created. Nothing in
here updates them: "next" is always derived by filtering on status.
"""
from __future__ import annotations

import random
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Min, Q

from .exceptions import NotFound, persistence_errors
from .models import Assignment

STRATEGIES = ("ordered", "random")


def _pending(annotator_id, task_id):
    return Assignment.objects.filter(
        annotator_id=annotator_id, task_id=task_id, status="pending"
    ).order_by("seq_pos", "id")


def _seeded_choice(ids: List[int], annotator_id, task_id) -> int:
    # Same annotator, task and pending count always give the same pick.
    rng = random.Random(f"{annotator_id}:{task_id}:{len(ids)}")
    return ids[rng.randrange(len(ids))]


def find_next_assignment_by_user_and_task(
    annotator_id, task_id: int, strategy: Optional[str] = None
) -> Assignment:
    """Return one pending assignment of ``annotator_id`` in ``task_id``.

    ``ordered`` takes the lowest sequence position; ``random`` takes a seeded
    pseudo-random member of the pending set. Raises NotFound when nothing is
    pending.
    """
    strategy = strategy or settings.NEXT_ASSIGNMENT_STRATEGY
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown next-assignment strategy: {strategy}")

    with persistence_errors("find_next_assignment_by_user_and_task"):
        pending = _pending(annotator_id, task_id)
        if strategy == "ordered":
            assignment = pending.first()
        else:
            ids = list(pending.values_list("id", flat=True))
            assignment = (
                Assignment.objects.get(pk=_seeded_choice(ids, annotator_id, task_id))
                if ids
                else None
            )

    if assignment is None:
        raise NotFound(
            f"No pending assignments for annotator {annotator_id} in task {task_id}."
        )
    return assignment


def find_next_assignment_by_user(annotator_id) -> Optional[Assignment]:
    """Globally next pending assignment: newest task first, then queue order."""
    with persistence_errors("find_next_assignment_by_user"):
        return (
            Assignment.objects.filter(annotator_id=annotator_id, status="pending")
            .order_by("-task_id", "seq_pos")
            .first()
        )


def count_assignments_by_user_and_task(annotator_id, task_id: int) -> Dict[str, int]:
    """Return ``{"next": seq_pos, "total": count}`` for an annotator's queue.

    ``next`` falls back to ``total + 1`` when every assignment is done, which
    the annotation screen reads as "past the end".
    """
    with persistence_errors("count_assignments_by_user_and_task"):
        stats = Assignment.objects.filter(
            annotator_id=annotator_id, task_id=task_id
        ).aggregate(
            total=Count("id"),
            next=Min("seq_pos", filter=Q(status="pending")),
        )
    total = stats["total"] or 0
    next_pos = stats["next"]
    return {
        "next": next_pos if next_pos is not None else total + 1,
        "total": total,
    }


def find_assignment_by_user_task_seq(annotator_id, task_id: int, seq_pos: int) -> Assignment:
    with persistence_errors("find_assignment_by_user_task_seq"):
        assignment = (
            Assignment.objects.filter(
                annotator_id=annotator_id, task_id=task_id, seq_pos=seq_pos
            )
            .order_by("id")
            .first()
        )
    if assignment is None:
        raise NotFound(
            f"No assignment at position {seq_pos} for annotator {annotator_id} in task {task_id}."
        )
    return assignment


def find_assignments_by_task_and_user(
    task_id: int, annotator_id=None, annotator_number: Optional[int] = None
) -> List[Assignment]:
    qs = Assignment.objects.filter(task_id=task_id)
    if annotator_id is not None:
        qs = qs.filter(annotator_id=annotator_id)
    if annotator_number is not None:
        qs = qs.filter(annotator_number=annotator_number)
    with persistence_errors("find_assignments_by_task_and_user"):
        return list(qs.order_by("id"))

"""Move the assignments of annotator slots to other users.

Each assignment is re-bound in its own atomic update; there is no enclosing
transaction. If the process dies half way, the slots handled so far keep
their new user and the rest keep the old one. Two reassignments of the same
task must not run concurrently: nothing here locks the task.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from .exceptions import IdentityProviderError, NotFound, persistence_errors
from .identity import assign_user_to_task
from .models import Assignment, EventLog, Task, UserProfile

logger = logging.getLogger(__name__)


class ReassignmentOutcome(str, Enum):
    SUCCESS = "success"
    NO_OP = "no_op"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"


MESSAGES = {
    ReassignmentOutcome.SUCCESS: "All the assignments have been reassigned",
    ReassignmentOutcome.NO_OP: "No changes have been made",
    ReassignmentOutcome.PARTIAL_FAILURE: "Some assignment updates failed",
    ReassignmentOutcome.TOTAL_FAILURE: "All assignment updates failed",
}


@dataclass
class SlotFailure:
    annotator_number: int
    email: str
    reason: str
    assignment_id: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            "annotator_number": self.annotator_number,
            "email": self.email,
            "assignment_id": self.assignment_id,
            "reason": self.reason,
        }


@dataclass
class ReassignmentResult:
    succeeded: int = 0
    failed: int = 0
    annotators: List[Dict] = field(default_factory=list)
    failures: List[SlotFailure] = field(default_factory=list)

    @property
    def outcome(self) -> ReassignmentOutcome:
        if self.failed and self.succeeded:
            return ReassignmentOutcome.PARTIAL_FAILURE
        if self.failed:
            return ReassignmentOutcome.TOTAL_FAILURE
        if self.succeeded:
            return ReassignmentOutcome.SUCCESS
        return ReassignmentOutcome.NO_OP

    @property
    def message(self) -> str:
        return MESSAGES[self.outcome]

    @property
    def ok(self) -> bool:
        return self.outcome in (ReassignmentOutcome.SUCCESS, ReassignmentOutcome.NO_OP)

    def to_dict(self) -> Dict:
        return {
            "outcome": self.outcome.value,
            "message": self.message,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "annotators": self.annotators,
            "failures": [f.to_dict() for f in self.failures],
        }


def get_all_annotators_from_task(task_id: int) -> List[Dict]:
    """One row per (slot, bound user) of a task, ordered by slot."""
    with persistence_errors("get_all_annotators_from_task"):
        rows = (
            Assignment.objects.filter(task_id=task_id)
            .values(
                "annotator_number",
                "annotator_id",
                "annotator__email",
                "annotator__profile__role",
            )
            .distinct()
            .order_by("annotator_number", "annotator_id")
        )
        return [
            {
                "id": row["annotator_id"],
                "email": row["annotator__email"],
                "annotator_number": row["annotator_number"],
                "role": row["annotator__profile__role"],
            }
            for row in rows
        ]


def _rebind(assignment: Assignment, user_id: int) -> None:
    with transaction.atomic():
        assignment.annotator_id = user_id
        assignment.save(update_fields=["annotator"])


def update_assignees(task_id: int, new_emails: List[str]) -> ReassignmentResult:
    """Bind each annotator slot of a task to the user with the matching e-mail.

    ``new_emails[i]`` targets the i-th row of ``get_all_annotators_from_task``.
    An empty string or the slot's current e-mail leaves the slot alone.
    """
    if not Task.objects.filter(pk=task_id).exists():
        raise NotFound(f"Task {task_id} not found.")

    annotators = get_all_annotators_from_task(task_id)
    if len(new_emails) != len(annotators):
        raise ValidationError(
            {
                "new_emails": f"Expected {len(annotators)} e-mails (one per annotator), "
                f"got {len(new_emails)}."
            }
        )

    result = ReassignmentResult()
    for slot, email in zip(annotators, new_emails):
        if not email or email.lower() == (slot["email"] or "").lower():
            continue
        number = slot["annotator_number"]

        try:
            user = assign_user_to_task(email, task_id)
        except IdentityProviderError as exc:
            skipped = Assignment.objects.filter(task_id=task_id, annotator_number=number).count()
            result.failed += max(skipped, 1)
            result.failures.append(SlotFailure(number, email, str(exc)))
            logger.warning("Skipping slot %s of task %s: %s", number, task_id, exc)
            continue

        with persistence_errors("update_assignees"):
            assignments = list(
                Assignment.objects.filter(
                    task_id=task_id, annotator_number=number
                ).order_by("id")
            )
            role = (
                UserProfile.objects.filter(user_id=user.pk)
                .values_list("role", flat=True)
                .first()
            )
        for assignment in assignments:
            try:
                _rebind(assignment, user.pk)
                result.succeeded += 1
            except DatabaseError as exc:
                result.failed += 1
                result.failures.append(SlotFailure(number, email, str(exc), assignment.pk))
                logger.warning(
                    "Failed to reassign assignment %s to user %s: %s",
                    assignment.pk,
                    user.pk,
                    exc,
                )

        slot["id"] = user.pk
        slot["email"] = email
        slot["role"] = role

    result.annotators = annotators
    if result.outcome is not ReassignmentOutcome.NO_OP:
        EventLog.objects.create(
            event_type="ASSIGNEES_UPDATED",
            payload={"task_id": task_id, **result.to_dict()},
        )
    logger.info(
        "Reassignment of task %s: %s (%s succeeded, %s failed)",
        task_id,
        result.outcome.value,
        result.succeeded,
        result.failed,
    )
    return result

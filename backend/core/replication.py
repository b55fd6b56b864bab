from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from django.db import transaction

from .exceptions import NotFound, RemapError, ServiceError, persistence_errors
from .models import Assignment, EventLog, Task
from .reassignment import get_all_annotators_from_task
from .remapper import EntityRemapper

logger = logging.getLogger(__name__)


def log_event(event_type: str, actor: str = "", payload=None):
    EventLog.objects.create(
        event_type=event_type, actor=actor or "", payload=payload or {}
    )


def _get_task(task_id: int) -> Task:
    try:
        return Task.objects.get(pk=task_id)
    except Task.DoesNotExist:
        raise NotFound(f"Task {task_id} not found.") from None


def _rich_assignments(task_id: int) -> List[Assignment]:
    with persistence_errors("find_rich_assignments_by_task"):
        return list(
            Assignment.objects.filter(task_id=task_id)
            .select_related("document")
            .order_by("id")
        )


def replicate_task(task_id: int) -> Task:
    """Deep-copy a task with its assignments, annotations and relations.

    The copy keeps slot numbers, sequence positions, status, ratings and
    origin. Everything is written in one transaction.
    """
    source = _get_task(task_id)
    with transaction.atomic():
        with persistence_errors("replicate_task"):
            new_task = Task.objects.create(
                project_id=source.project_id,
                name=source.name,
                description=source.description,
                labelset_id=source.labelset_id,
                annotation_level=source.annotation_level,
                ann_guidelines=source.ann_guidelines,
                ml_model_id=source.ml_model_id,
            )
        remapper = EntityRemapper(new_task)
        remapper.copy_task_graph(source.pk)
        log_event(
            "TASK_REPLICATED",
            payload={
                "source_task_id": source.pk,
                "task_id": new_task.pk,
                "assignments": len(remapper.assignment_ids),
                "annotations": len(remapper.annotation_ids),
                "relations": remapper.relation_count,
            },
        )
    logger.info("Task %s replicated as task %s", source.pk, new_task.pk)
    return new_task


def _document_correspondence(
    original: Iterable[Assignment], similar: Iterable[Assignment]
) -> Dict[int, int]:
    """Map similar-task document ids onto original-task ones by document name."""
    name_to_id: Dict[str, int] = {}
    for a in original:
        name_to_id.setdefault(a.document.name, a.document_id)

    document_ids: Dict[int, int] = {}
    for a in similar:
        if a.document.name not in name_to_id:
            raise RemapError(
                f"Document '{a.document.name}' has no counterpart in the original task."
            )
        document_ids[a.document_id] = name_to_id[a.document.name]
    return document_ids


def merge_tasks(original_task_id: int, similar_task_id: int) -> Task:
    """Combine two compatible tasks into a new merged task.

    The original task is replicated; the similar task's assignments are then
    added with their documents re-pointed at the original's documents (matched
    by name). Annotations and relations of the similar task are not carried
    over. Any failure rolls the merge back and surfaces as one ServiceError.
    """
    _get_task(original_task_id)
    _get_task(similar_task_id)

    try:
        with transaction.atomic():
            merged = replicate_task(original_task_id)
            original = _rich_assignments(original_task_id)
            similar = _rich_assignments(similar_task_id)

            document_ids = _document_correspondence(original, similar)
            remapper = EntityRemapper(merged)
            remapper.remap_assignments(similar, document_ids=document_ids)
            # TODO: copy the similar task's annotations and relations once the
            # product decides how duplicated spans should be reconciled.

            log_event(
                "TASKS_MERGED",
                payload={
                    "original_task_id": original_task_id,
                    "similar_task_id": similar_task_id,
                    "task_id": merged.pk,
                    "merged_assignments": len(similar),
                },
            )
    except Exception as exc:
        logger.warning(
            "Merging task %s into %s failed: %s", similar_task_id, original_task_id, exc
        )
        raise ServiceError(f"Error in merge_tasks: {exc}") from exc

    logger.info(
        "Tasks %s and %s merged into task %s", original_task_id, similar_task_id, merged.pk
    )
    return merged


def find_similar_tasks(task_id: int, annotators: List[str]) -> List[Dict]:
    """Tasks that could be merged with ``task_id``.

    A candidate has the same annotation level, the same labels and exactly the
    given set of annotator e-mails.
    """
    current = _get_task(task_id)
    wanted = set(annotators)
    candidates = (
        Task.objects.filter(annotation_level=current.annotation_level)
        .exclude(pk=task_id)
        .select_related("labelset")
        .order_by("id")
    )
    similar = []
    for task in candidates:
        if task.labelset.labels != current.labelset.labels:
            continue
        emails = {a["email"] for a in get_all_annotators_from_task(task.pk)}
        if emails ^ wanted:
            continue
        similar.append({"id": task.pk, "name": task.name or f"Task-{task.pk}"})
    return similar

"""Copy assignments, annotations and relations under a new task.

The copy runs in three stages. Each stage bulk-inserts its rows, then records
``old id -> new id`` for them before the next stage may start, because the
next stage resolves its foreign keys through that map:

    assignments -> assignment_ids
    annotations (assignment via assignment_ids) -> annotation_ids
    relations (from/to via annotation_ids)

Document, label and widget (``ls_id``) references are copied unchanged.
Run it inside ``transaction.atomic`` so a failed stage leaves nothing behind.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .exceptions import RemapError, persistence_errors
from .models import Annotation, AnnotationRelation, Assignment, Task

logger = logging.getLogger(__name__)


def _resolve(mapping: Dict[int, int], old_id: int, what: str) -> int:
    try:
        return mapping[old_id]
    except KeyError:
        raise RemapError(f"No copied {what} for source id {old_id}.") from None


def _check_inserted(objs: List, what: str) -> None:
    # The backend must hand back primary keys from bulk inserts.
    if any(obj.pk is None for obj in objs):
        raise RemapError(f"Bulk insert of {what} did not return primary keys.")


class EntityRemapper:
    def __init__(self, target_task: Task):
        self.target_task = target_task
        self.assignment_ids: Optional[Dict[int, int]] = None
        self.annotation_ids: Optional[Dict[int, int]] = None
        self.relation_count = 0

    def remap_assignments(
        self,
        assignments: Iterable[Assignment],
        document_ids: Optional[Dict[int, int]] = None,
    ) -> List[Assignment]:
        """Copy ``assignments`` under the target task.

        ``document_ids`` optionally re-points document references
        (source document id -> target document id).
        """
        with persistence_errors("remap_assignments"):
            sources = list(assignments)
        copies = []
        for a in sources:
            document_id = a.document_id
            if document_ids is not None:
                document_id = _resolve(document_ids, a.document_id, "document")
            copies.append(
                Assignment(
                    task=self.target_task,
                    document_id=document_id,
                    annotator_id=a.annotator_id,
                    annotator_number=a.annotator_number,
                    seq_pos=a.seq_pos,
                    status=a.status,
                    difficulty_rating=a.difficulty_rating,
                    origin=a.origin,
                )
            )
        with persistence_errors("remap_assignments"):
            created = Assignment.objects.bulk_create(copies)
        _check_inserted(created, "assignments")

        mapping = dict(self.assignment_ids or {})
        mapping.update({src.pk: new.pk for src, new in zip(sources, created)})
        self.assignment_ids = mapping
        return created

    def remap_annotations(self, annotations: Iterable[Annotation]) -> List[Annotation]:
        if self.assignment_ids is None:
            raise RemapError("Assignments must be remapped before annotations.")

        with persistence_errors("remap_annotations"):
            sources = list(annotations)
        copies = [
            Annotation(
                assignment_id=_resolve(self.assignment_ids, a.assignment_id, "assignment"),
                label=a.label,
                start_index=a.start_index,
                end_index=a.end_index,
                text=a.text,
                ls_id=a.ls_id,
                confidence_rating=a.confidence_rating,
                origin=a.origin,
            )
            for a in sources
        ]
        with persistence_errors("remap_annotations"):
            created = Annotation.objects.bulk_create(copies)
        _check_inserted(created, "annotations")

        self.annotation_ids = {src.pk: new.pk for src, new in zip(sources, created)}
        return created

    def remap_relations(
        self, relations: Iterable[AnnotationRelation]
    ) -> List[AnnotationRelation]:
        if self.annotation_ids is None:
            raise RemapError("Annotations must be remapped before relations.")

        with persistence_errors("remap_relations"):
            sources = list(relations)
        copies = [
            AnnotationRelation(
                from_annotation_id=_resolve(self.annotation_ids, r.from_annotation_id, "annotation"),
                to_annotation_id=_resolve(self.annotation_ids, r.to_annotation_id, "annotation"),
                ls_from=r.ls_from,
                ls_to=r.ls_to,
                direction=r.direction,
                labels=list(r.labels or []),
            )
            for r in sources
        ]
        with persistence_errors("remap_relations"):
            created = AnnotationRelation.objects.bulk_create(copies)
        self.relation_count += len(created)
        return created

    def copy_task_graph(self, source_task_id: int) -> None:
        """Copy every assignment, annotation and relation of a task."""
        self.remap_assignments(
            Assignment.objects.filter(task_id=source_task_id).order_by("id")
        )
        self.remap_annotations(
            Annotation.objects.filter(assignment__task_id=source_task_id).order_by("id")
        )
        self.remap_relations(
            AnnotationRelation.objects.filter(
                from_annotation__assignment__task_id=source_task_id
            ).order_by("id")
        )
        logger.info(
            "Copied task %s into task %s: %s assignments, %s annotations, %s relations",
            source_task_id,
            self.target_task.pk,
            len(self.assignment_ids),
            len(self.annotation_ids),
            self.relation_count,
        )

"""Progress overviews of a task for editors: per annotator and per document."""
from __future__ import annotations

from typing import Dict, List, Optional

from django.db.models import CharField, Value
from django.db.models.functions import Cast, Coalesce, Concat

from .exceptions import persistence_errors
from .models import Assignment, Document

ROWS_PER_PAGE = 10


def _page_bounds(page: int):
    page = max(int(page or 1), 1)
    start = (page - 1) * ROWS_PER_PAGE
    return start, start + ROWS_PER_PAGE


def _annotator_label(email: Optional[str], annotator_number: int) -> str:
    return email or f"annotator {annotator_number}"


def _next_seq_pos(assignments: List[Assignment]) -> Optional[int]:
    pending = [a.seq_pos for a in assignments if a.status == "pending"]
    return min(pending) if pending else None


def group_by_annotators(task_id: int, page: int = 1, name: str = "") -> Dict:
    """Annotator slots of a task with their assignments, 10 slots per page."""
    start, end = _page_bounds(page)
    # LIKE wildcards typed by the user are dropped, not interpreted.
    sanitized = (name or "").replace("%", "").replace("_", "")

    with persistence_errors("group_by_annotators"):
        qs = Assignment.objects.filter(task_id=task_id)
        total = qs.values("annotator_number").distinct().count()

        slots = qs.annotate(
            annotator_name=Coalesce(
                "annotator__email",
                Concat(
                    Value("annotator "),
                    Cast("annotator_number", CharField()),
                    output_field=CharField(),
                ),
                output_field=CharField(),
            )
        )
        if sanitized:
            slots = slots.filter(annotator_name__icontains=sanitized)
        slots = (
            slots.values("annotator_number", "annotator__email", "annotator_name")
            .distinct()
            .order_by("annotator_number")[start:end]
        )

        grouped = []
        for slot in slots:
            number = slot["annotator_number"]
            assignments = list(
                qs.filter(annotator_number=number)
                .select_related("document")
                .order_by("seq_pos", "id")
            )
            grouped.append(
                {
                    "type": "annotator",
                    "key": f"ann-{number}",
                    "data": {
                        "name": slot["annotator_name"],
                        "amount_done": sum(1 for a in assignments if a.status == "done"),
                        "amount_total": len(assignments),
                        "next_seq_pos": _next_seq_pos(assignments),
                    },
                    "children": [
                        {
                            "type": "document",
                            "key": f"ass-{a.pk}",
                            "data": {
                                "assignment_id": a.pk,
                                "seq_pos": a.seq_pos,
                                "document_id": a.document_id,
                                "document_name": a.document.name,
                                "difficulty_rating": a.difficulty_rating,
                                "status": a.status,
                            },
                        }
                        for a in assignments
                    ],
                }
            )
    return {"data": grouped, "total": total}


def group_by_documents(task_id: int, page: int = 1, document: str = "") -> Dict:
    """Documents of a task with one child row per assignment."""
    start, end = _page_bounds(page)

    with persistence_errors("group_by_documents"):
        documents = Document.objects.filter(assignments__task_id=task_id).distinct()
        if document:
            documents = documents.filter(name__icontains=document)
        total = documents.count()

        grouped = []
        for doc in documents.order_by("id")[start:end]:
            assignments = list(
                Assignment.objects.filter(task_id=task_id, document=doc)
                .select_related("annotator")
                .order_by("seq_pos", "id")
            )
            grouped.append(
                {
                    "type": "document",
                    "key": f"doc-{doc.pk}",
                    "data": {
                        "document_id": doc.pk,
                        "document_name": doc.name,
                        "amount_done": sum(1 for a in assignments if a.status == "done"),
                        "amount_total": len(assignments),
                        "next_seq_pos": _next_seq_pos(assignments),
                    },
                    "children": [
                        {
                            "type": "annotator",
                            "key": f"ass-{a.pk}",
                            "data": {
                                "name": _annotator_label(
                                    a.annotator.email if a.annotator else None,
                                    a.annotator_number,
                                ),
                                "seq_pos": a.seq_pos,
                                "difficulty_rating": a.difficulty_rating,
                                "status": a.status,
                            },
                        }
                        for a in assignments
                    ],
                }
            )
    return {"data": grouped, "total": total}


def get_unannotated_documents(task_id: int) -> List[int]:
    """Documents of a task that have an assignment without any annotation."""
    with persistence_errors("get_unannotated_documents"):
        return list(
            Assignment.objects.filter(task_id=task_id, annotations__isnull=True)
            .values_list("document_id", flat=True)
            .distinct()
            .order_by("document_id")
        )


def count_assignments_by_project(project_id: int) -> int:
    with persistence_errors("count_assignments_by_project"):
        return Assignment.objects.filter(task__project_id=project_id).count()

"""Object builders shared by the core test modules."""
from django.contrib.auth import get_user_model

from core.models import Assignment, Document, Labelset, Project, Task

DEFAULT_LABELS = [{"name": "Landlord", "color": "#1f77b4"}, {"name": "Tenant", "color": "#ff7f0e"}]


def make_user(email):
    return get_user_model().objects.create(username=email, email=email)


def make_project(name="Leases"):
    return Project.objects.create(name=name)


def make_task(project, name="Parties", labels=None, level="span"):
    labelset = Labelset.objects.create(
        name=f"{name} labels",
        labels=DEFAULT_LABELS if labels is None else labels,
    )
    return Task.objects.create(
        project=project,
        name=name,
        description=f"{name} description",
        labelset=labelset,
        annotation_level=level,
        ann_guidelines="Full names only.",
    )


def make_documents(project, *names):
    return [
        Document.objects.create(project=project, name=name, full_text=f"Text of {name}")
        for name in names
    ]


def make_assignment(task, document, annotator, number, seq, status="pending", **extra):
    return Assignment.objects.create(
        task=task,
        document=document,
        annotator=annotator,
        annotator_number=number,
        seq_pos=seq,
        status=status,
        **extra,
    )

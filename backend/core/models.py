from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


ORIGIN_CHOICES = [
    ("manual", "manual"),
    ("imported", "imported"),
]


class Project(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    editor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="projects",
    )
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return self.name


class Labelset(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    labels = models.JSONField(
        default=list, blank=True, help_text="List of {name, color} objects."
    )
    editor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="labelsets",
    )
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return self.name


class MlModel(models.Model):
    """Optional model that pre-annotates documents for a task."""

    name = models.CharField(max_length=200)
    url = models.URLField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return self.name


class Document(models.Model):
    project = models.ForeignKey(
        Project, on_delete=models.CASCADE, related_name="documents"
    )
    name = models.CharField(max_length=512)
    full_text = models.TextField()
    source = models.CharField(max_length=20, choices=ORIGIN_CHOICES, default="manual")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["project", "name"], name="doc_proj_name_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Task(models.Model):
    ANNOTATION_LEVELS = [
        ("document", "document"),
        ("span", "span"),
    ]
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="tasks")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    labelset = models.ForeignKey(
        Labelset, on_delete=models.PROTECT, related_name="tasks"
    )
    annotation_level = models.CharField(
        max_length=20, choices=ANNOTATION_LEVELS, default="span"
    )
    ann_guidelines = models.TextField(blank=True)
    ml_model = models.ForeignKey(
        MlModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tasks",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["project", "annotation_level"], name="task_proj_level_idx"),
        ]

    def __str__(self) -> str:
        return self.name or f"Task-{self.pk}"


class Assignment(models.Model):
    """One annotator slot's unit of work on one document within a task.

    ``annotator_number`` is the durable slot; ``annotator`` is the user
    currently bound to it and may change on reassignment. ``seq_pos`` is
    fixed at creation and never renumbered.
    """

    STATUS = [
        ("pending", "pending"),
        ("done", "done"),
    ]
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="assignments")
    document = models.ForeignKey(
        Document, on_delete=models.CASCADE, related_name="assignments"
    )
    annotator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assignments",
    )
    annotator_number = models.IntegerField(default=0)
    seq_pos = models.IntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS, default="pending")
    difficulty_rating = models.IntegerField(default=0)
    origin = models.CharField(max_length=20, choices=ORIGIN_CHOICES, default="manual")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(
                fields=["annotator", "task", "status"], name="asgn_user_task_status_idx"
            ),
            models.Index(fields=["task", "annotator_number"], name="asgn_task_slot_idx"),
            models.Index(fields=["task", "seq_pos"], name="asgn_task_seq_idx"),
        ]


class Annotation(models.Model):
    assignment = models.ForeignKey(
        Assignment, on_delete=models.CASCADE, related_name="annotations"
    )
    label = models.CharField(max_length=200)
    start_index = models.IntegerField(
        null=True, blank=True, help_text="Empty for document-level annotations."
    )
    end_index = models.IntegerField(null=True, blank=True)
    text = models.TextField(blank=True)
    ls_id = models.CharField(
        max_length=64,
        blank=True,
        help_text="Widget-local identifier referenced by relations.",
    )
    confidence_rating = models.IntegerField(default=0)
    origin = models.CharField(max_length=20, choices=ORIGIN_CHOICES, default="manual")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["assignment", "ls_id"], name="anno_asgn_lsid_idx"),
        ]


class AnnotationRelation(models.Model):
    DIRECTIONS = [
        ("right", "right"),
        ("left", "left"),
        ("bi", "bi"),
    ]
    from_annotation = models.ForeignKey(
        Annotation, on_delete=models.CASCADE, related_name="outgoing_relations"
    )
    to_annotation = models.ForeignKey(
        Annotation, on_delete=models.CASCADE, related_name="incoming_relations"
    )
    ls_from = models.CharField(max_length=64, blank=True)
    ls_to = models.CharField(max_length=64, blank=True)
    direction = models.CharField(max_length=10, choices=DIRECTIONS, default="right")
    labels = models.JSONField(default=list, blank=True)


class UserProfile(models.Model):
    ROLES = [
        ("editor", "editor"),
        ("annotator", "annotator"),
    ]
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile"
    )
    role = models.CharField(max_length=20, choices=ROLES, default="annotator")
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Login hints such as assigned_task_id / invited_task_id.",
    )


class EventLog(models.Model):
    event_type = models.CharField(max_length=64)
    ts = models.DateTimeField(default=timezone.now)
    actor = models.CharField(max_length=128, blank=True)
    payload = models.JSONField(default=dict, blank=True)

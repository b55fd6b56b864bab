from rest_framework import serializers
from .models import (
    Project,
    Labelset,
    Document,
    Task,
    Assignment,
    Annotation,
    AnnotationRelation,
)
from .sequencer import STRATEGIES


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ["id", "name", "description", "editor", "created_at"]


class LabelsetSerializer(serializers.ModelSerializer):
    class Meta:
        model = Labelset
        fields = ["id", "name", "description", "labels", "editor", "created_at"]

    def validate_labels(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Labels must be a list.")
        for label in value:
            if not isinstance(label, dict) or not label.get("name"):
                raise serializers.ValidationError(
                    "Each label needs at least a 'name'."
                )
        return value


class DocumentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Document
        fields = ["id", "project", "name", "full_text", "source", "created_at"]


class TaskSerializer(serializers.ModelSerializer):
    class Meta:
        model = Task
        fields = [
            "id",
            "project",
            "name",
            "description",
            "labelset",
            "annotation_level",
            "ann_guidelines",
            "ml_model",
            "created_at",
        ]


class AssignmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Assignment
        fields = [
            "id",
            "task",
            "document",
            "annotator",
            "annotator_number",
            "seq_pos",
            "status",
            "difficulty_rating",
            "origin",
            "created_at",
        ]


class AnnotationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Annotation
        fields = [
            "id",
            "assignment",
            "label",
            "start_index",
            "end_index",
            "text",
            "ls_id",
            "confidence_rating",
            "origin",
            "created_at",
        ]

    def validate(self, attrs):
        start = attrs.get("start_index")
        end = attrs.get("end_index")
        if (start is None) != (end is None):
            raise serializers.ValidationError(
                "start_index and end_index must both be set or both be empty."
            )
        if start is not None and end < start:
            raise serializers.ValidationError(
                {"end_index": "end_index must not precede start_index."}
            )
        return attrs


class AnnotationRelationSerializer(serializers.ModelSerializer):
    class Meta:
        model = AnnotationRelation
        fields = [
            "id",
            "from_annotation",
            "to_annotation",
            "ls_from",
            "ls_to",
            "direction",
            "labels",
        ]

    def validate(self, attrs):
        source = attrs.get("from_annotation")
        target = attrs.get("to_annotation")
        if source and target and source.assignment_id != target.assignment_id:
            raise serializers.ValidationError(
                "Relations must link annotations of the same assignment."
            )
        return attrs


class NextAssignmentQuerySerializer(serializers.Serializer):
    annotator_id = serializers.IntegerField()
    task_id = serializers.IntegerField(required=False)
    strategy = serializers.ChoiceField(choices=STRATEGIES, required=False)


class CountAssignmentsQuerySerializer(serializers.Serializer):
    annotator_id = serializers.IntegerField()
    task_id = serializers.IntegerField()


class ProgressQuerySerializer(serializers.Serializer):
    task_id = serializers.IntegerField()
    page = serializers.IntegerField(min_value=1, default=1)
    name = serializers.CharField(required=False, allow_blank=True, default="")
    document = serializers.CharField(required=False, allow_blank=True, default="")


class MergeTasksSerializer(serializers.Serializer):
    similar_task_id = serializers.IntegerField()


class UpdateAssigneesSerializer(serializers.Serializer):
    new_emails = serializers.ListField(
        child=serializers.EmailField(allow_blank=True), allow_empty=True
    )

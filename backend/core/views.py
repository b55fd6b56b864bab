from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django_ratelimit.decorators import ratelimit
from django.utils.decorators import method_decorator
from .models import (
    Project,
    Labelset,
    Document,
    Task,
    Assignment,
    Annotation,
    AnnotationRelation,
)
from .serializers import (
    ProjectSerializer,
    LabelsetSerializer,
    DocumentSerializer,
    TaskSerializer,
    AssignmentSerializer,
    AnnotationSerializer,
    AnnotationRelationSerializer,
    NextAssignmentQuerySerializer,
    CountAssignmentsQuerySerializer,
    ProgressQuerySerializer,
    MergeTasksSerializer,
    UpdateAssigneesSerializer,
)
from .permissions import HasWriteToken
from . import progress, reassignment, replication, sequencer


def _query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class ProjectViewSet(viewsets.ModelViewSet):
    queryset = Project.objects.all().order_by("id")
    serializer_class = ProjectSerializer
    permission_classes = [HasWriteToken]

    @action(detail=True, methods=["get"], permission_classes=[AllowAny])
    def stats(self, request, pk=None):
        """Assignment count of this project."""
        project = self.get_object()
        return Response(
            {
                "project_id": project.id,
                "assignments": progress.count_assignments_by_project(project.id),
            }
        )


class LabelsetViewSet(viewsets.ModelViewSet):
    queryset = Labelset.objects.all().order_by("id")
    serializer_class = LabelsetSerializer
    permission_classes = [HasWriteToken]


class DocumentViewSet(viewsets.ModelViewSet):
    queryset = Document.objects.select_related("project").all().order_by("id")
    serializer_class = DocumentSerializer
    permission_classes = [HasWriteToken]


class TaskViewSet(viewsets.ModelViewSet):
    queryset = (
        Task.objects.select_related("project", "labelset", "ml_model")
        .all()
        .order_by("id")
    )
    serializer_class = TaskSerializer
    permission_classes = [HasWriteToken]

    @action(detail=True, methods=["post"])
    def replicate(self, request, pk=None):
        """Deep copy of the task with its assignments, annotations and relations."""
        task = self.get_object()
        new_task = replication.replicate_task(task.id)
        return Response(TaskSerializer(new_task).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def merge(self, request, pk=None):
        """Merge a similar task into a copy of this one."""
        task = self.get_object()
        serializer = MergeTasksSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merged = replication.merge_tasks(
            task.id, serializer.validated_data["similar_task_id"]
        )
        return Response(TaskSerializer(merged).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def annotators(self, request, pk=None):
        task = self.get_object()
        return Response(reassignment.get_all_annotators_from_task(task.id))

    @action(detail=True, methods=["post"])
    @method_decorator(ratelimit(key="ip", rate="30/h", method="POST"))
    def assignees(self, request, pk=None):
        """Re-bind annotator slots to the given e-mails.

        Failure outcomes answer 500 but still carry the annotators and the
        per-assignment failures, so the caller can see what did change.
        """
        task = self.get_object()
        serializer = UpdateAssigneesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = reassignment.update_assignees(
            task.id, serializer.validated_data["new_emails"]
        )
        status_code = (
            status.HTTP_200_OK if result.ok else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return Response(result.to_dict(), status=status_code)

    @action(detail=True, methods=["get"])
    def similar(self, request, pk=None):
        task = self.get_object()
        raw = request.query_params.get("annotators", "")
        annotators = [email.strip() for email in raw.split(",") if email.strip()]
        return Response(replication.find_similar_tasks(task.id, annotators))

    @action(detail=True, methods=["get"], url_path="unannotated-documents")
    def unannotated_documents(self, request, pk=None):
        task = self.get_object()
        return Response(progress.get_unannotated_documents(task.id))


class AssignmentViewSet(viewsets.ModelViewSet):
    queryset = Assignment.objects.select_related("task").all().order_by("id")
    serializer_class = AssignmentSerializer
    permission_classes = [HasWriteToken]

    @action(detail=False, methods=["get"])
    def next(self, request):
        """Next assignment of an annotator, within one task or across all of them."""
        params = _query(NextAssignmentQuerySerializer, request)
        if "task_id" in params:
            assignment = sequencer.find_next_assignment_by_user_and_task(
                params["annotator_id"], params["task_id"], params.get("strategy")
            )
        else:
            assignment = sequencer.find_next_assignment_by_user(params["annotator_id"])
        if assignment is None:
            return Response(None)
        return Response(AssignmentSerializer(assignment).data)

    @action(detail=False, methods=["get"])
    def count(self, request):
        params = _query(CountAssignmentsQuerySerializer, request)
        return Response(
            sequencer.count_assignments_by_user_and_task(
                params["annotator_id"], params["task_id"]
            )
        )

    @action(detail=False, methods=["get"], url_path="by-annotator")
    def by_annotator(self, request):
        params = _query(ProgressQuerySerializer, request)
        return Response(
            progress.group_by_annotators(
                params["task_id"], params["page"], params["name"]
            )
        )

    @action(detail=False, methods=["get"], url_path="by-document")
    def by_document(self, request):
        params = _query(ProgressQuerySerializer, request)
        return Response(
            progress.group_by_documents(
                params["task_id"], params["page"], params["document"]
            )
        )


class AnnotationViewSet(viewsets.ModelViewSet):
    queryset = Annotation.objects.select_related("assignment").all().order_by("id")
    serializer_class = AnnotationSerializer
    permission_classes = [HasWriteToken]


class AnnotationRelationViewSet(viewsets.ModelViewSet):
    queryset = AnnotationRelation.objects.all().order_by("id")
    serializer_class = AnnotationRelationSerializer
    permission_classes = [HasWriteToken]

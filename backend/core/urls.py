from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    ProjectViewSet,
    LabelsetViewSet,
    DocumentViewSet,
    TaskViewSet,
    AssignmentViewSet,
    AnnotationViewSet,
    AnnotationRelationViewSet,
)
from .health import health_check, liveness, readiness

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="project")
router.register(r"labelsets", LabelsetViewSet, basename="labelset")
router.register(r"documents", DocumentViewSet, basename="document")
router.register(r"tasks", TaskViewSet, basename="task")
router.register(r"assignments", AssignmentViewSet, basename="assignment")
router.register(r"annotations", AnnotationViewSet, basename="annotation")
router.register(r"relations", AnnotationRelationViewSet, basename="relation")

urlpatterns = [
    path("", include(router.urls)),
    path("health/", health_check, name="health_check"),
    path("health/liveness/", liveness, name="health_liveness"),
    path("health/readiness/", readiness, name="health_readiness"),
]

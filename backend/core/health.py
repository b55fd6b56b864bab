"""Health check endpoints for monitoring and deployment readiness."""
from django.db import connection
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status as http_status
from celery import current_app
from celery.app.control import Inspect


def check_database():
    """Check if database connection is working."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return {"status": "ok", "message": "Database connection successful"}
    except Exception as e:
        return {"status": "error", "message": f"Database error: {str(e)}"}


def check_broker():
    """Check that the Celery broker used for invitation mails is reachable."""
    try:
        with current_app.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1)
        return {"status": "ok", "message": "Broker connection successful"}
    except Exception as e:
        return {"status": "error", "message": f"Broker error: {str(e)}"}


def check_mail_workers():
    """Check if Celery workers are consuming the mail queue."""
    try:
        active_workers = Inspect(app=current_app).active()
        if active_workers:
            return {
                "status": "ok",
                "message": f"{len(active_workers)} worker(s) active",
                "workers": list(active_workers.keys()),
            }
        return {
            "status": "warning",
            "message": "No active Celery workers found",
            "workers": [],
        }
    except Exception as e:
        return {"status": "error", "message": f"Celery check error: {str(e)}"}


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Comprehensive health check endpoint.

    Returns HTTP 200 unless the database is down. A missing broker or worker
    only delays mails, so it reports "degraded".

    GET /api/health/
    """
    db_health = check_database()
    broker_health = check_broker()
    worker_health = check_mail_workers()

    overall_status = "ok"
    status_code = http_status.HTTP_200_OK
    if db_health["status"] == "error":
        overall_status = "error"
        status_code = http_status.HTTP_503_SERVICE_UNAVAILABLE
    elif broker_health["status"] == "error" or worker_health["status"] == "error":
        overall_status = "degraded"

    return Response(
        {
            "status": overall_status,
            "database": db_health,
            "broker": broker_health,
            "celery": worker_health,
        },
        status=status_code,
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def liveness(request):
    """GET /api/health/liveness/"""
    return Response({"status": "ok"}, status=http_status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([AllowAny])
def readiness(request):
    """
    Readiness probe: ready once the database answers.

    GET /api/health/readiness/
    """
    db_health = check_database()

    if db_health["status"] == "ok":
        return Response({"status": "ready", "database": db_health}, status=http_status.HTTP_200_OK)
    return Response(
        {"status": "not_ready", "database": db_health},
        status=http_status.HTTP_503_SERVICE_UNAVAILABLE,
    )

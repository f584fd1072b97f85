"""
Reports app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to ``ReportWorkflowService`` (or the
       query service for reads).
    3. Serialize the result and return a DRF ``Response``.

Role and assignment checks are enforced exclusively inside the service
layer; domain exceptions are rendered by
``core.domain.exception_handler.domain_exception_handler``.

ViewSets
--------
- ``ReportViewSet``  — reports plus workflow ``@action`` endpoints.
- ``MessageViewSet`` — the report thread, nested under a report.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from accounts.models import StaffRole
from core.domain.access import require_citizen, require_role

from .models import Message, Report
from .serializers import (
    AssignExternalSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    ReportCreateSerializer,
    ReportFilterSerializer,
    ReportSerializer,
    ReviewUpdateSerializer,
    WorkerUpdateSerializer,
)
from .services import ReportQueryService, ReportWorkflowService, WorkflowResult


def _result_response(result: WorkflowResult, status_code: int = status.HTTP_200_OK) -> Response:
    """Serialize the report and attach dispatch warnings, if any."""
    data = dict(ReportSerializer(result.report).data)
    if result.warnings:
        data["warnings"] = result.warnings
    return Response(data, status=status_code)


class ReportViewSet(viewsets.ViewSet):
    """
    Central ViewSet for reports.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; reports are never edited or deleted through a
    generic CRUD endpoint.
    """

    permission_classes = [IsAuthenticated]
    queryset = Report.objects.none()

    @extend_schema(
        summary="List reports (staff)",
        description=(
            "Return reports with optional filters. Technical staff and external "
            "maintainers only see the categories covered by their offices."
        ),
        parameters=[
            OpenApiParameter(name="citizen_username", type=str, required=False),
            OpenApiParameter(name="status", type=str, required=False),
            OpenApiParameter(name="title", type=str, required=False),
            OpenApiParameter(name="category", type=str, required=False),
            OpenApiParameter(name="staff_username", type=str, required=False),
            OpenApiParameter(name="from_date", type=str, required=False, description="ISO date, inclusive."),
            OpenApiParameter(name="to_date", type=str, required=False, description="ISO date, inclusive."),
        ],
        responses={200: OpenApiResponse(response=ReportSerializer(many=True), description="Report list.")},
        tags=["Reports"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/reports/ — Staff report listing."""
        filter_serializer = ReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        queryset = ReportQueryService.get_filtered_queryset(
            request.user, filter_serializer.validated_data,
        )
        return Response(ReportSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Submit a report (citizen)",
        request=ReportCreateSerializer,
        responses={
            201: OpenApiResponse(response=ReportSerializer, description="Report created in Pending status."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Reports"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/reports/ — Citizen files a new report."""
        require_citizen(request.user)
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ReportWorkflowService.create_report(
            citizen_username=request.user.username,
            title=data["title"],
            description=data["description"],
            category=data["category"],
            latitude=data["latitude"],
            longitude=data["longitude"],
            anonymous=data["anonymous"],
            photos=data["photos"],
        )
        return _result_response(result, status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve report detail (staff)",
        responses={200: OpenApiResponse(response=ReportSerializer, description="Report detail.")},
        tags=["Reports"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """GET /api/reports/{id}/"""
        require_role(request.user, *StaffRole.values)
        report = ReportQueryService.get_report(pk)
        return Response(ReportSerializer(report).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="map", permission_classes=[AllowAny])
    @extend_schema(
        summary="Public map reports",
        description="Reports visible on the public map: everything except Pending and Rejected.",
        responses={200: OpenApiResponse(response=ReportSerializer(many=True), description="Map reports.")},
        tags=["Reports"],
    )
    def map(self, request: Request) -> Response:
        """GET /api/reports/map/"""
        queryset = ReportQueryService.get_map_queryset()
        return Response(ReportSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    # ── Workflow @actions ─────────────────────────────────────────────

    @action(detail=True, methods=["patch"], url_path="review")
    @extend_schema(
        summary="Review a pending report (MPRO)",
        description=(
            "Accept (status=Assigned, optionally changing category) or reject "
            "(status=Rejected, comment mandatory) a pending report."
        ),
        request=ReviewUpdateSerializer,
        responses={
            200: OpenApiResponse(response=ReportSerializer, description="Report reviewed."),
            400: OpenApiResponse(description="Comment / category policy violation."),
            403: OpenApiResponse(description="Not a reviewer."),
            409: OpenApiResponse(description="Invalid transition or concurrent update."),
        },
        tags=["Reports – Workflow"],
    )
    def review(self, request: Request, pk: int = None) -> Response:
        """PATCH /api/reports/{id}/review/"""
        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ReportWorkflowService.reviewer_update(
            report_id=pk,
            actor_username=request.user.username,
            new_status=data["status"],
            comment=data.get("comment"),
            new_category=data.get("category"),
        )
        return _result_response(result)

    @action(detail=True, methods=["patch"], url_path="status")
    @extend_schema(
        summary="Update report progress (TOSM / EM)",
        request=WorkerUpdateSerializer,
        responses={
            200: OpenApiResponse(response=ReportSerializer, description="Report updated."),
            403: OpenApiResponse(description="Report not assigned to the caller."),
            409: OpenApiResponse(description="Invalid transition or concurrent update."),
        },
        tags=["Reports – Workflow"],
    )
    def update_status(self, request: Request, pk: int = None) -> Response:
        """PATCH /api/reports/{id}/status/"""
        serializer = WorkerUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ReportWorkflowService.worker_update(
            report_id=pk,
            actor_username=request.user.username,
            new_status=data["status"],
            comment=data.get("comment"),
        )
        return _result_response(result)

    @action(detail=True, methods=["post"], url_path="assign-self")
    @extend_schema(
        summary="Self-assign a report (TOSM)",
        request=None,
        responses={
            200: OpenApiResponse(response=ReportSerializer, description="Report assigned to the caller."),
            409: OpenApiResponse(description="Already assigned or not in Assigned status."),
        },
        tags=["Reports – Assignment"],
    )
    def assign_self(self, request: Request, pk: int = None) -> Response:
        """POST /api/reports/{id}/assign-self/"""
        result = ReportWorkflowService.self_assign(report_id=pk, actor_username=request.user.username)
        return _result_response(result)

    @action(detail=True, methods=["post"], url_path="assign-external")
    @extend_schema(
        summary="Engage an external maintainer (assigned TOSM)",
        request=AssignExternalSerializer,
        responses={
            200: OpenApiResponse(response=ReportSerializer, description="External maintainer assigned."),
            403: OpenApiResponse(description="Caller is not the assigned staff member."),
            409: OpenApiResponse(description="Already delegated or no staff assigned."),
        },
        tags=["Reports – Assignment"],
    )
    def assign_external(self, request: Request, pk: int = None) -> Response:
        """POST /api/reports/{id}/assign-external/"""
        serializer = AssignExternalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ReportWorkflowService.assign_external(
            report_id=pk,
            em_username=serializer.validated_data["external_maintainer"],
            actor_username=request.user.username,
        )
        return _result_response(result)


class MessageViewSet(viewsets.ViewSet):
    """
    Report thread.

    GET  /api/reports/{report_pk}/messages/ → messages visible to the caller
    POST /api/reports/{report_pk}/messages/ → append a message
    """

    permission_classes = [IsAuthenticated]
    queryset = Message.objects.none()

    @extend_schema(
        summary="List report messages",
        description="Citizens receive public messages only; staff receive the whole thread.",
        responses={
            200: OpenApiResponse(response=MessageSerializer(many=True), description="Ordered thread."),
            403: OpenApiResponse(description="Citizen does not own the report."),
        },
        tags=["Reports – Messages"],
    )
    def list(self, request: Request, report_pk: int = None) -> Response:
        messages = ReportWorkflowService.list_messages(report_pk, request.user.kind, request.user.pk)
        return Response(MessageSerializer(messages, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Post a report message",
        request=MessageCreateSerializer,
        responses={
            201: OpenApiResponse(response=ReportSerializer, description="Message appended."),
            403: OpenApiResponse(description="Caller does not take part in the report."),
        },
        tags=["Reports – Messages"],
    )
    def create(self, request: Request, report_pk: int = None) -> Response:
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ReportWorkflowService.post_message(
            report_id=report_pk,
            actor_username=request.user.username,
            actor_kind=request.user.kind,
            body=serializer.validated_data["body"],
            is_private=serializer.validated_data.get("is_private"),
        )
        return _result_response(result, status.HTTP_201_CREATED)

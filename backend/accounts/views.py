"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers and return the result wrapped in a DRF ``Response``.

View Map
--------
- ``LoginView`` — POST /auth/login/
- ``MeView``    — GET /me/
- ``ExternalMaintainerListView`` — GET /staff/external/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import require_role

from .models import StaffRole
from .serializers import (
    CustomTokenObtainPairSerializer,
    StaffFilterSerializer,
    StaffSummarySerializer,
    UserDetailSerializer,
)
from .services import StaffDirectoryService


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a citizen or staff member by username
    or e-mail plus password and returns a JWT pair with the user profile.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="``access``, ``refresh`` and ``user``."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data
        return Response(payload, status=status.HTTP_200_OK)


class MeView(APIView):
    """GET /api/accounts/me/ → profile of the authenticated user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user",
        responses={200: UserDetailSerializer},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)


class ExternalMaintainerListView(APIView):
    """
    GET /api/accounts/staff/external/?category=<category>

    Technical staff only.  Lists active external maintainers, optionally
    restricted to those whose offices cover ``category``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List external maintainers",
        parameters=[StaffFilterSerializer],
        responses={
            200: StaffSummarySerializer(many=True),
            400: OpenApiResponse(description="Unknown category."),
            403: OpenApiResponse(description="Caller is not technical staff."),
        },
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        require_role(request.user, StaffRole.TOSM, message="Only technical staff can list external maintainers.")

        filters = StaffFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        staff = StaffDirectoryService.list_external_maintainers(
            category=filters.validated_data.get("category"),
        )
        return Response(StaffSummarySerializer(staff, many=True).data, status=status.HTTP_200_OK)

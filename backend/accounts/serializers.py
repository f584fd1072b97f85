"""
Accounts app serializers.

Login (SimpleJWT with an ``identifier`` field) and the read-only user
representation returned by ``/me/`` and the login response, plus the
staff directory used to pick an external maintainer.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Office, OfficeCategory

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via ``IdentifierAuthBackend``.
    3. Adds ``kind`` and ``role`` claims to the token payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username or e-mail address.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["kind"] = user.kind
        token["role"] = user.role or None
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class OfficeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Office
        fields = ["id", "name", "category", "is_external"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used by ``/me/`` and the login response).

    ``role`` is ``null`` for citizens and ``offices`` is empty for them.
    """

    role = serializers.SerializerMethodField()
    offices = OfficeSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "kind",
            "role",
            "offices",
            "telegram_username",
            "receive_emails",
            "date_joined",
        ]
        read_only_fields = fields

    def get_role(self, obj) -> str | None:
        return obj.role or None


# ═══════════════════════════════════════════════════════════════════
#  Staff Directory Serializers
# ═══════════════════════════════════════════════════════════════════


class StaffFilterSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=OfficeCategory.choices, required=False)


class StaffSummarySerializer(serializers.ModelSerializer):
    offices = OfficeSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "first_name", "last_name", "email", "role", "offices"]
        read_only_fields = fields

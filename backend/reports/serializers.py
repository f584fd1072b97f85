"""
Reports app serializers.

Request serializers validate the shape of incoming payloads; response
serializers render reports and messages.  **No business logic** lives
here — every workflow rule is enforced in ``services.py``.
"""

from __future__ import annotations

from rest_framework import serializers
from rest_framework.fields import empty

from accounts.models import OfficeCategory

from .models import Message, Report, ReportStatus


# ═══════════════════════════════════════════════════════════════════
#  Request Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportCreateSerializer(serializers.Serializer):
    """
    Citizen report submission.

    ``photos`` carries 1–3 references to already-stored images; any extra
    reference is ignored by the service.
    """

    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    category = serializers.ChoiceField(choices=OfficeCategory.choices)
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    anonymous = serializers.BooleanField(default=False)
    photos = serializers.ListField(
        child=serializers.CharField(max_length=500),
        allow_empty=False,
        help_text="Photo references; the first one is mandatory.",
    )


class ReportFilterSerializer(serializers.Serializer):
    """Query-parameter filters for the staff report listing."""

    citizen_username = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=ReportStatus.choices, required=False)
    title = serializers.CharField(required=False)
    category = serializers.ChoiceField(choices=OfficeCategory.choices, required=False)
    staff_username = serializers.CharField(required=False)
    from_date = serializers.DateField(required=False)
    to_date = serializers.DateField(required=False)

    def validate(self, attrs):
        if ("from_date" in attrs) != ("to_date" in attrs):
            raise serializers.ValidationError("from_date and to_date must be given together.")
        if "from_date" in attrs and attrs["from_date"] > attrs["to_date"]:
            raise serializers.ValidationError("from_date must not be after to_date.")
        return attrs


class ReviewUpdateSerializer(serializers.Serializer):
    """Reviewer decision on a pending report."""

    status = serializers.ChoiceField(choices=ReportStatus.choices)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.ChoiceField(
        choices=OfficeCategory.choices,
        required=False,
        allow_null=True,
    )


class WorkerUpdateSerializer(serializers.Serializer):
    """Progress update by the assigned TOSM or EM."""

    status = serializers.ChoiceField(choices=ReportStatus.choices)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AssignExternalSerializer(serializers.Serializer):
    external_maintainer = serializers.CharField(
        help_text="Username of the external maintainer to engage.",
    )


class OptionalBooleanField(serializers.BooleanField):
    """Boolean whose absence from form data stays "not supplied" instead of ``false``."""

    default_empty_html = empty


class MessageCreateSerializer(serializers.Serializer):
    """
    New thread message.

    ``is_private`` is mandatory for technical staff, forced to ``true`` for
    external maintainers and ignored for citizens.  The null default keeps
    "not supplied" distinguishable from ``false``, for JSON and form posts alike.
    """

    body = serializers.CharField(trim_whitespace=True)
    is_private = OptionalBooleanField(required=False, allow_null=True, default=None)


# ═══════════════════════════════════════════════════════════════════
#  Response Serializers
# ═══════════════════════════════════════════════════════════════════


class MessageSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ["id", "sequence", "body", "is_private", "author", "created_at"]
        read_only_fields = fields

    def get_author(self, obj: Message) -> str | None:
        """Staff username at posting time, or ``None`` for citizen messages."""
        return None if obj.is_from_citizen else obj.author_username


class ReportSerializer(serializers.ModelSerializer):
    """
    Report representation shared by every endpoint.

    The citizen's username is hidden for anonymous reports.
    """

    citizen = serializers.SerializerMethodField()
    coordinates = serializers.SerializerMethodField()
    photos = serializers.ListField(child=serializers.CharField(), read_only=True)
    assigned_staff = serializers.SlugRelatedField(slug_field="username", read_only=True)
    assigned_external_maintainer = serializers.SlugRelatedField(slug_field="username", read_only=True)

    class Meta:
        model = Report
        fields = [
            "id",
            "citizen",
            "title",
            "description",
            "category",
            "status",
            "coordinates",
            "anonymous",
            "photos",
            "comment",
            "assigned_staff",
            "assigned_external_maintainer",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_citizen(self, obj: Report) -> str | None:
        if obj.anonymous or obj.citizen_id is None:
            return None
        return obj.citizen.username

    def get_coordinates(self, obj: Report) -> list[float]:
        return [obj.latitude, obj.longitude]

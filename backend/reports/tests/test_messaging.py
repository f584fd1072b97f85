"""
Tests for the report thread: who may post, visibility, ordering and the
per-requester projection.
"""

from __future__ import annotations

import pytest

from accounts.models import UserKind
from core.domain.exceptions import NotFound, PermissionDenied, ValidationError
from core.models import Notification
from reports.models import ReportStatus
from reports.serializers import MessageSerializer
from reports.services import MessagingService

pytestmark = pytest.mark.django_db


@pytest.fixture()
def active_report(make_report, t1, em):
    return make_report(status=ReportStatus.IN_PROGRESS, assigned_staff=t1, assigned_external_maintainer=em)


class TestAppend:
    def test_citizen_message_is_public(self, active_report, citizen):
        result = MessagingService.append(active_report.pk, "Any news?", citizen, is_private=True)

        assert result.message.is_private is False
        assert result.message.author is None
        assert result.message.is_from_citizen
        assert result.message.author_kind == UserKind.CITIZEN
        assert result.warnings == []

    def test_other_citizen_is_forbidden(self, active_report, create_user):
        stranger = create_user(username="mallory")
        with pytest.raises(PermissionDenied):
            MessagingService.append(active_report.pk, "Hello", stranger)

    def test_tosm_must_choose_visibility(self, active_report, t1):
        with pytest.raises(ValidationError):
            MessagingService.append(active_report.pk, "Crew dispatched", t1)

    @pytest.mark.parametrize("flag", [True, False])
    def test_tosm_visibility_is_respected(self, active_report, t1, flag):
        result = MessagingService.append(active_report.pk, "Crew dispatched", t1, is_private=flag)
        assert result.message.is_private is flag
        assert result.message.author_id == t1.pk

    def test_staff_attribution_survives_account_deletion(self, active_report, t1):
        message = MessagingService.append(active_report.pk, "internal note", t1, is_private=True).message

        t1.delete()
        message.refresh_from_db()

        assert message.author_id is None
        assert not message.is_from_citizen
        assert MessageSerializer(message).data["author"] == "t1"

    @pytest.mark.parametrize("flag", [None, False, True])
    def test_em_messages_are_always_private(self, active_report, em, flag):
        result = MessagingService.append(active_report.pk, "Valve ordered", em, is_private=flag)
        assert result.message.is_private is True

    def test_unassigned_staff_cannot_post(self, active_report, reviewer, t2):
        for outsider in (reviewer, t2):
            with pytest.raises(PermissionDenied):
                MessagingService.append(active_report.pk, "Hi", outsider, is_private=False)

    @pytest.mark.parametrize("body", ["", "   ", None])
    def test_empty_body(self, active_report, citizen, body):
        with pytest.raises(ValidationError):
            MessagingService.append(active_report.pk, body, citizen)

    def test_missing_report(self, citizen):
        with pytest.raises(NotFound):
            MessagingService.append(999999, "Hello", citizen)

    def test_sequence_is_monotonic(self, active_report, citizen, t1, em):
        first = MessagingService.append(active_report.pk, "one", citizen).message
        second = MessagingService.append(active_report.pk, "two", t1, is_private=False).message
        third = MessagingService.append(active_report.pk, "three", em).message
        assert [first.sequence, second.sequence, third.sequence] == [1, 2, 3]

    def test_staff_message_notifies_citizen_whatever_the_visibility(self, active_report, citizen, t1):
        MessagingService.append(active_report.pk, "internal note", t1, is_private=True)

        notifications = Notification.objects.filter(recipient=citizen)
        assert notifications.count() == 1
        assert notifications.get().report_id == active_report.pk

    def test_citizen_message_notifies_nobody(self, active_report, citizen):
        MessagingService.append(active_report.pk, "Any news?", citizen)
        assert Notification.objects.count() == 0


class TestReadAll:
    def test_projection_by_requester_kind(self, active_report, citizen, t1):
        public = MessagingService.append(active_report.pk, "Still leaking", citizen).message
        private = MessagingService.append(active_report.pk, "Need a permit", t1, is_private=True).message

        citizen_view = list(MessagingService.read_all(active_report.pk, UserKind.CITIZEN))
        staff_view = list(MessagingService.read_all(active_report.pk, UserKind.STAFF))

        assert citizen_view == [public]
        assert staff_view == [public, private]

    def test_em_messages_hidden_from_citizen(self, active_report, em):
        MessagingService.append(active_report.pk, "Valve ordered", em, is_private=False)
        assert list(MessagingService.read_all(active_report.pk, UserKind.CITIZEN)) == []
        assert MessagingService.read_all(active_report.pk, UserKind.STAFF).count() == 1

    def test_unknown_kind(self, active_report):
        with pytest.raises(ValidationError):
            MessagingService.read_all(active_report.pk, "robot")

    def test_missing_report(self):
        with pytest.raises(NotFound):
            MessagingService.read_all(999999, UserKind.STAFF)

    def test_citizen_reads_only_own_thread(self, active_report, citizen, create_user):
        MessagingService.append(active_report.pk, "Still leaking", citizen)
        stranger = create_user(username="mallory")

        assert MessagingService.read_all(active_report.pk, UserKind.CITIZEN, citizen.pk).count() == 1
        with pytest.raises(PermissionDenied):
            MessagingService.read_all(active_report.pk, UserKind.CITIZEN, stranger.pk)

"""Tests for the NotificationBatch aggregate."""

import pytest

from notifyhub.modules.notification.domain.aggregates import NotificationBatch
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import (
    BatchInvariantViolationError,
    CannotAddToBatchError,
    CannotAssignToBatchError,
    CannotProcessError,
    EmptyBatchError,
    IllegalTransitionError,
    NotProcessingError,
)
from tests.factories import make_batch, make_notification


class TestBatchCreation:
    def test_create_assigns_every_notification(self):
        notifications = [make_notification() for _ in range(3)]

        batch = NotificationBatch.create(NotificationChannel.WHATSAPP, notifications)

        assert batch.status.is_pending()
        assert batch.size == 3
        assert all(n.batch_id == batch.id for n in notifications)
        assert list(batch.notifications) == notifications

    def test_empty_batch_fails(self):
        with pytest.raises(EmptyBatchError):
            NotificationBatch.create(NotificationChannel.EMAIL, [])

    def test_mixed_channels_fail(self):
        notifications = [
            make_notification(NotificationChannel.EMAIL),
            make_notification(NotificationChannel.WHATSAPP),
        ]

        with pytest.raises(BatchInvariantViolationError):
            NotificationBatch.create(NotificationChannel.EMAIL, notifications)

    def test_duplicate_members_fail(self):
        notification = make_notification()

        with pytest.raises(BatchInvariantViolationError):
            NotificationBatch(NotificationChannel.WHATSAPP, [notification, notification])

    def test_ineligible_member_leaves_others_unassigned(self):
        eligible = make_notification()
        sent = make_notification().mark_as_sent()

        with pytest.raises(CannotAssignToBatchError):
            NotificationBatch.create(NotificationChannel.WHATSAPP, [eligible, sent])
        assert eligible.batch_id is None

    def test_member_of_another_batch_is_rejected(self):
        batch = make_batch(1)

        with pytest.raises(CannotAssignToBatchError):
            NotificationBatch.create(NotificationChannel.WHATSAPP, list(batch.notifications))

    def test_notifications_view_is_read_only(self):
        batch = make_batch(2)

        assert isinstance(batch.notifications, tuple)


class TestBatchMembership:
    def test_add_notification(self):
        batch = make_batch(1)
        extra = make_notification(contact="+5531988887777")

        batch.add_notification(extra)

        assert batch.size == 2
        assert extra.batch_id == batch.id

    def test_add_mismatched_channel_fails(self):
        batch = make_batch(1)
        email = make_notification(NotificationChannel.EMAIL)

        assert not batch.can_add_notification(email)
        with pytest.raises(CannotAddToBatchError):
            batch.add_notification(email)
        assert batch.size == 1
        assert email.batch_id is None

    def test_add_sent_notification_fails(self):
        batch = make_batch(1)
        sent = make_notification().mark_as_sent()

        with pytest.raises(CannotAddToBatchError):
            batch.add_notification(sent)
        assert batch.size == 1

    def test_cannot_add_once_processing(self):
        batch = make_batch(1)
        batch.start_processing()

        with pytest.raises(CannotAddToBatchError):
            batch.add_notification(make_notification())


class TestBatchProcessing:
    def test_happy_path(self):
        batch = make_batch(2)
        assert batch.can_be_processed()

        batch.start_processing()
        assert batch.status.is_processing()
        assert batch.processed_at is None
        assert not batch.can_be_processed()

        batch.mark_as_completed()
        assert batch.status.is_completed()
        assert batch.processed_at is not None

    def test_member_views_follow_status(self):
        batch = make_batch(3)
        first, second, _ = batch.notifications
        batch.start_processing()

        first.mark_as_sent()
        second.mark_as_failed("number not found")

        assert len(batch.pending_notifications) == 1
        assert batch.sent_notifications == [first]
        assert batch.failed_notifications == [second]

    def test_start_twice_fails(self):
        batch = make_batch(1)
        batch.start_processing()

        with pytest.raises(CannotProcessError):
            batch.start_processing()
        assert batch.status.is_processing()

    def test_start_rechecks_member_status(self):
        batch = make_batch(2)
        batch.notifications[1].mark_as_failed("number not found")

        with pytest.raises(BatchInvariantViolationError):
            batch.start_processing()
        assert batch.status.is_pending()

    def test_complete_requires_processing(self):
        batch = make_batch(1)

        with pytest.raises(NotProcessingError):
            batch.mark_as_completed()
        assert batch.status.is_pending()

    def test_pending_batch_can_fail(self):
        batch = make_batch(1)

        batch.mark_as_failed("vendor unavailable")

        assert batch.status.reason == "vendor unavailable"
        assert batch.processed_at is not None

    def test_final_batch_cannot_change(self):
        batch = make_batch(1)
        batch.start_processing()
        batch.mark_as_completed()

        with pytest.raises(IllegalTransitionError):
            batch.mark_as_failed("late")
        assert batch.status.is_completed()

    def test_failed_batch_keeps_sent_members(self):
        batch = make_batch(3)
        batch.start_processing()
        first, second, third = batch.notifications
        first.mark_as_sent()
        second.mark_as_failed("boom")
        third.mark_as_sent()

        batch.mark_as_failed("1 of 3 notifications failed")

        assert batch.status.is_failed()
        assert batch.sent_notifications == [first, third]
        assert batch.failed_notifications == [second]

    def test_processing_summary(self):
        batch = make_batch(2)
        batch.start_processing()
        batch.notifications[0].mark_as_sent()

        summary = batch.get_processing_summary()

        assert summary["status"] == "processing"
        assert summary["total"] == 2
        assert summary["sent"] == 1
        assert summary["pending"] == 1
        assert summary["failed"] == 0

"""Tests for the notification inbox, real-time pushes and event handlers."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.bookings import services as booking_services
from apps.notifications import services
from apps.notifications.consumers import CLOSE_UNAUTHENTICATED, NotificationConsumer
from apps.notifications.models import Notification
from apps.notifications.realtime import PUSH_MESSAGE_TYPE, push_to_user, user_group
from apps.properties.models import Property, Site
from apps.users.models import User
from shared.exceptions import NotFoundError


@pytest.fixture
def user(db):
    return User.objects.create_user(email="inbox@example.com", password="InboxPass123")


@pytest.fixture
def other(db):
    return User.objects.create_user(email="other@example.com", password="OtherPass123")


@pytest.fixture
def admin(db):
    return User.objects.create_user(email="admin@example.com", password="AdminPass123", role=User.RoleChoices.ADMIN)


def notify(recipient, **kwargs):
    kwargs.setdefault("type", Notification.Type.SYSTEM)
    kwargs.setdefault("title", "Hello")
    kwargs.setdefault("message", "Something happened")
    return services.create_notification(recipient_id=recipient.id, **kwargs)


# ============================================================================
# SERVICES
# ============================================================================

@pytest.mark.django_db
def test_mark_all_as_read_is_idempotent(user):
    notify(user)
    notify(user)

    assert services.mark_all_as_read(user) == 2
    assert services.mark_all_as_read(user) == 0
    assert services.unread_count(user) == 0


@pytest.mark.django_db
def test_mark_as_read_of_someone_elses_notification_is_not_found(user, other):
    notification = notify(user)

    with pytest.raises(NotFoundError):
        services.mark_as_read(other, notification.id)

    notification.refresh_from_db()
    assert notification.is_read is False


@pytest.mark.django_db
def test_mark_as_read_sets_timestamp(user):
    notification = services.mark_as_read(user, notify(user).id)

    assert notification.is_read is True
    assert notification.read_at is not None
    assert services.unread_count(user) == 0


@pytest.mark.django_db
def test_title_and_message_are_truncated(user):
    notification = notify(user, title="t" * 150, message="m" * 600)

    assert len(notification.title) == 100
    assert len(notification.message) == 500


@pytest.mark.django_db
def test_high_priority_notification_is_emailed(user, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        notify(user, priority=Notification.Priority.HIGH, title="Order cancelled")

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [user.email]


# ============================================================================
# REAL-TIME
# ============================================================================

@pytest.mark.django_db
def test_new_notification_is_pushed_after_commit(user, django_capture_on_commit_callbacks):
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(user_group(user.id), channel)

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        notification = notify(user)

    assert len(callbacks) == 2
    pushed = async_to_sync(layer.receive)(channel)
    counted = async_to_sync(layer.receive)(channel)
    assert pushed["type"] == PUSH_MESSAGE_TYPE
    assert pushed["event"] == "new_notification"
    assert pushed["payload"]["id"] == notification.id
    assert counted["event"] == "unread_count_update"
    assert counted["payload"] == {"count": 1}
    async_to_sync(layer.group_discard)(user_group(user.id), channel)


@pytest.mark.django_db
def test_read_all_pushes_read_event_and_count(user, django_capture_on_commit_callbacks):
    notify(user)
    notify(user)
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(user_group(user.id), channel)

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        services.mark_all_as_read(user)

    assert len(callbacks) == 2
    read = async_to_sync(layer.receive)(channel)
    counted = async_to_sync(layer.receive)(channel)
    assert read["event"] == "notification_read"
    assert read["payload"] == {"all": True}
    assert counted["event"] == "unread_count_update"
    assert counted["payload"] == {"count": 0}
    async_to_sync(layer.group_discard)(user_group(user.id), channel)


@pytest.mark.django_db
def test_nothing_is_pushed_without_commit(user, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        notify(user)

    # Scheduled, not sent: the test transaction never commits.
    assert len(callbacks) == 2


def test_push_without_listeners_is_harmless():
    assert push_to_user(999999, "new_notification", {"id": 1}) is True


def test_consumer_rejects_anonymous_socket():
    async def scenario():
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        communicator.scope["user"] = AnonymousUser()
        connected, code = await communicator.connect()
        return connected, code

    connected, code = async_to_sync(scenario)()

    assert connected is False
    assert code == CLOSE_UNAUTHENTICATED


@pytest.mark.django_db
def test_consumer_answers_ping_and_relays_pushes(user, other):
    async def scenario():
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        communicator.scope["user"] = user
        connected, _ = await communicator.connect()
        assert connected

        await communicator.send_json_to({"event": "ping"})
        pong = await communicator.receive_json_from()

        await get_channel_layer().group_send(
            user_group(user.id),
            {"type": PUSH_MESSAGE_TYPE, "event": "new_notification", "payload": {"id": 7}},
        )
        pushed = await communicator.receive_json_from()

        peer = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        peer.scope["user"] = other
        await peer.connect()
        await communicator.send_json_to({"event": "typing", "to": other.id, "is_typing": True})
        typing = await peer.receive_json_from()

        await peer.disconnect()
        await communicator.disconnect()
        return pong, pushed, typing

    pong, pushed, typing = async_to_sync(scenario)()

    assert pong == {"event": "pong", "data": {}}
    assert pushed == {"event": "new_notification", "data": {"id": 7}}
    assert typing == {"event": "user_typing", "data": {"from": user.id, "is_typing": True}}


# ============================================================================
# API
# ============================================================================

@pytest.mark.django_db
def test_list_includes_unread_count(user, other):
    notify(user)
    read = notify(user)
    services.mark_as_read(user, read.id)
    notify(other)
    client = APIClient()
    client.force_authenticate(user)

    response = client.get(reverse("notification-list"))
    unread = client.get(reverse("notification-list"), {"unread_only": "true"})

    assert response.status_code == status.HTTP_200_OK
    assert response.data["pagination"]["total"] == 2
    assert response.data["unread_count"] == 1
    assert unread.data["pagination"]["total"] == 1


@pytest.mark.django_db
def test_read_all_then_unread_count_is_zero(user):
    notify(user)
    client = APIClient()
    client.force_authenticate(user)

    first = client.patch(reverse("notification-read-all"))
    second = client.patch(reverse("notification-read-all"))
    count = client.get(reverse("notification-unread-count"))

    assert first.data["data"] == {"updated": 1}
    assert second.data["data"] == {"updated": 0}
    assert count.data["data"] == {"count": 0}


@pytest.mark.django_db
def test_delete_single_and_all(user):
    first = notify(user)
    notify(user)
    client = APIClient()
    client.force_authenticate(user)

    deleted = client.delete(reverse("notification-detail", args=[first.id]))
    missing = client.delete(reverse("notification-detail", args=[first.id]))
    cleared = client.delete(reverse("notification-list"))

    assert deleted.status_code == status.HTTP_200_OK
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert cleared.data["data"] == {"deleted": 1}
    assert not Notification.objects.filter(recipient=user).exists()


@pytest.mark.django_db
def test_only_admins_create_notifications(user, admin):
    client = APIClient()
    payload = {"recipients": [user.id], "title": "Maintenance", "message": "Back soon"}

    client.force_authenticate(user)
    forbidden = client.post(reverse("notification-list"), payload, format="json")
    client.force_authenticate(admin)
    created = client.post(reverse("notification-list"), payload, format="json")

    assert forbidden.status_code == status.HTTP_403_FORBIDDEN
    assert created.status_code == status.HTTP_201_CREATED, created.data
    notification = Notification.objects.get(recipient=user)
    assert notification.sender_id == admin.id
    assert notification.type == Notification.Type.SYSTEM


# ============================================================================
# EVENT HANDLERS
# ============================================================================

@pytest.fixture
def site(db):
    host = User.objects.create_user(email="camp-host@example.com", password="HostPass123", role=User.RoleChoices.HOST)
    camp = Property.objects.create(host=host, name="River camp")
    return Site.objects.create(property=camp, name="R1", base_price=Decimal("100000"), max_guests=4)


@pytest.mark.django_db
def test_booking_lifecycle_notifies_host_and_guest(user, site):
    check_in = timezone.localdate() + timedelta(days=30)
    booking = booking_services.create_booking(
        user, site=site, check_in=check_in, check_out=check_in + timedelta(days=2)
    )
    host = site.property.host

    request = Notification.objects.get(recipient=host)
    assert request.type == Notification.Type.NEW_BOOKING_REQUEST
    assert request.booking_id == booking.id

    booking_services.confirm_booking(booking, host)
    confirmed = Notification.objects.get(recipient=user)
    assert confirmed.type == Notification.Type.BOOKING_CONFIRMED
    assert confirmed.action_type == Notification.ActionType.VIEW_BOOKING

    booking_services.cancel_booking(booking, user, reason="Change of plans")
    cancelled = Notification.objects.filter(recipient=host).latest("id")
    assert cancelled.type == Notification.Type.GUEST_CANCELLED_BOOKING


@pytest.mark.django_db
def test_host_cancellation_notifies_guest(user, site):
    check_in = timezone.localdate() + timedelta(days=30)
    booking = booking_services.create_booking(
        user, site=site, check_in=check_in, check_out=check_in + timedelta(days=2)
    )

    booking_services.cancel_booking(booking, site.property.host, reason="Flooding")

    notification = Notification.objects.get(recipient=user)
    assert notification.type == Notification.Type.BOOKING_CANCELLED
    assert notification.priority == Notification.Priority.HIGH
    assert "Flooding" in notification.message

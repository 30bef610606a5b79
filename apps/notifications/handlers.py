"""
Notification Event Handlers

Translate domain events from orders, bookings, reviews and chat into
persisted notifications. Handlers are registered once from
``NotificationsConfig.ready()``.

Each handler writes inside its own savepoint: a failing notification is
logged by the message bus and never rolls back the business operation
that published the event.
"""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore

from apps.bookings.events import BookingPaymentReceived, BookingRequested, BookingStatusChanged
from apps.chat.events import DirectMessageSent
from apps.orders.events import OrderCancellationRequested, OrderPlaced, OrderStatusChanged
from apps.reviews.events import ReviewCreated, ReviewReplied
from apps.tours.events import TourBookingStatusChanged
from apps.users.models import CustomUser
from shared.application.message_bus import message_bus

from .models import Notification
from .realtime import push_on_commit
from .services import create_notification, notify_users

logger = logging.getLogger(__name__)

Type = Notification.Type
Action = Notification.ActionType
Priority = Notification.Priority
Role = Notification.Role


# ============================================================================
# ORDERS
# ============================================================================

ORDER_STATUS_NOTIFICATIONS = {
    "confirmed": (Type.ORDER_CONFIRMED, "Order confirmed", "Your order {code} has been confirmed.", Priority.MEDIUM),
    "shipping": (Type.ORDER_SHIPPING, "Order on its way", "Your order {code} has been shipped.", Priority.MEDIUM),
    "delivered": (Type.ORDER_DELIVERED, "Order delivered", "Your order {code} has been delivered.", Priority.MEDIUM),
    "cancelled": (Type.ORDER_CANCELLED, "Order cancelled", "Your order {code} has been cancelled.", Priority.HIGH),
}


def handle_order_status_changed(event: OrderStatusChanged) -> None:
    type_, title, message, priority = ORDER_STATUS_NOTIFICATIONS.get(
        event.new_status,
        (Type.SYSTEM, "Order updated", "Your order {code} is now {status}.", Priority.LOW),
    )
    with transaction.atomic():
        create_notification(
            recipient_id=event.user_id,
            type=type_,
            title=title,
            message=message.format(code=event.code, status=event.new_status),
            priority=priority,
            action_type=Action.VIEW_ORDER,
            order_id=event.order_id,
            metadata={"previous_status": event.previous_status, "new_status": event.new_status},
        )


def handle_order_placed(event: OrderPlaced) -> None:
    admin_ids = list(CustomUser.objects.admins().values_list("id", flat=True))
    with transaction.atomic():
        notify_users(
            admin_ids,
            type=Type.SYSTEM,
            title="New order",
            message=f"Order {event.code} was placed ({event.payment_method}).",
            priority=Priority.LOW,
            action_type=Action.VIEW_ORDER,
            role=Role.ADMIN,
            order_id=event.order_id,
        )


def handle_order_cancellation_requested(event: OrderCancellationRequested) -> None:
    admin_ids = list(CustomUser.objects.admins().values_list("id", flat=True))
    message = f"The customer asked to cancel order {event.code}."
    if event.reason:
        message = f"{message} Reason: {event.reason}"
    with transaction.atomic():
        notify_users(
            admin_ids,
            sender_id=event.user_id,
            type=Type.ORDER_RETURN_REQUEST,
            title="Cancellation requested",
            message=message,
            priority=Priority.HIGH,
            action_type=Action.VIEW_ORDER,
            role=Role.ADMIN,
            order_id=event.order_id,
        )


# ============================================================================
# TOUR BOOKINGS
# ============================================================================

def handle_tour_booking_status_changed(event: TourBookingStatusChanged) -> None:
    if event.new_status == "completed":
        type_, title, message = Type.BOOKING_CONFIRMED, "Tour booking confirmed", "Your booking {code} for {tour} is confirmed."
    elif event.new_status == "cancelled":
        type_, title, message = Type.BOOKING_CANCELLED, "Tour booking cancelled", "Your booking {code} for {tour} was cancelled."
    else:
        return
    with transaction.atomic():
        create_notification(
            recipient_id=event.user_id,
            type=type_,
            title=title,
            message=message.format(code=event.code, tour=event.tour_name),
            action_type=Action.VIEW_BOOKING,
            tour_booking_id=event.booking_id,
        )


# ============================================================================
# CAMPSITE BOOKINGS
# ============================================================================

def handle_booking_requested(event: BookingRequested) -> None:
    with transaction.atomic():
        create_notification(
            recipient_id=event.host_id,
            sender_id=event.guest_id,
            type=Type.NEW_BOOKING_REQUEST,
            title="New booking request",
            message=f"{event.property_name}: stay from {event.check_in} to {event.check_out} ({event.code}).",
            priority=Priority.HIGH,
            action_type=Action.VIEW_BOOKING,
            role=Role.HOST,
            booking_id=event.booking_id,
            property_id=event.property_id,
        )


def handle_booking_status_changed(event: BookingStatusChanged) -> None:
    common = {
        "action_type": Action.VIEW_BOOKING,
        "booking_id": event.booking_id,
        "property_id": event.property_id,
        "metadata": {"previous_status": event.previous_status, "new_status": event.new_status},
    }
    status = event.new_status

    if status == "confirmed":
        notification = dict(
            recipient_id=event.guest_id,
            type=Type.BOOKING_CONFIRMED,
            title="Booking confirmed",
            message=f"Your stay at {event.property_name} ({event.code}) is confirmed.",
        )
    elif status == "cancelled" and event.actor_id == event.guest_id:
        notification = dict(
            recipient_id=event.host_id,
            sender_id=event.guest_id,
            type=Type.GUEST_CANCELLED_BOOKING,
            title="Guest cancelled",
            message=f"The guest cancelled booking {event.code} at {event.property_name}.",
            role=Role.HOST,
        )
    elif status == "cancelled":
        reason = f" Reason: {event.reason}" if event.reason else ""
        notification = dict(
            recipient_id=event.guest_id,
            type=Type.BOOKING_CANCELLED,
            title="Booking cancelled",
            message=f"Your booking {event.code} at {event.property_name} was cancelled.{reason}",
            priority=Priority.HIGH,
        )
    elif status == "completed":
        notification = dict(
            recipient_id=event.host_id,
            type=Type.GUEST_CHECKED_OUT,
            title="Guest checked out",
            message=f"The stay {event.code} at {event.property_name} is complete.",
            role=Role.HOST,
        )
    elif status == "refunded":
        notification = dict(
            recipient_id=event.guest_id,
            type=Type.PAYOUT_PROCESSED,
            title="Refund issued",
            message=f"Your booking {event.code} at {event.property_name} was refunded.",
        )
    else:
        return

    with transaction.atomic():
        create_notification(**common, **notification)


def handle_booking_payment_received(event: BookingPaymentReceived) -> None:
    with transaction.atomic():
        create_notification(
            recipient_id=event.host_id,
            sender_id=event.guest_id,
            type=Type.BOOKING_PAYMENT_RECEIVED,
            title="Payment received",
            message=f"Payment of {event.amount} received for booking {event.code}.",
            action_type=Action.VIEW_BOOKING,
            role=Role.HOST,
            booking_id=event.booking_id,
            property_id=event.property_id,
        )


# ============================================================================
# REVIEWS
# ============================================================================

def handle_review_created(event: ReviewCreated) -> None:
    with transaction.atomic():
        create_notification(
            recipient_id=event.host_id,
            sender_id=event.guest_id,
            type=Type.NEW_REVIEW_RECEIVED,
            title="New review",
            message=f"{event.property_name} received a {event.rating}-star review.",
            action_type=Action.VIEW_REVIEW,
            role=Role.HOST,
            review_id=event.review_id,
            property_id=event.property_id,
        )


def handle_review_replied(event: ReviewReplied) -> None:
    with transaction.atomic():
        create_notification(
            recipient_id=event.guest_id,
            sender_id=event.host_id,
            type=Type.REVIEW_REPLY,
            title="The host replied",
            message=f"The host of {event.property_name} replied to your review.",
            action_type=Action.VIEW_REVIEW,
            review_id=event.review_id,
            property_id=event.property_id,
        )


# ============================================================================
# CHAT
# ============================================================================

def handle_direct_message_sent(event: DirectMessageSent) -> None:
    with transaction.atomic():
        create_notification(
            recipient_id=event.recipient_id,
            sender_id=event.sender_id,
            type=Type.GUEST_MESSAGE,
            title=f"Message from {event.sender_name}",
            message=event.preview,
            priority=Priority.LOW,
            action_type=Action.VIEW_MESSAGE,
            metadata={"message_id": event.message_id},
        )
    push_on_commit(
        event.recipient_id,
        "support_new_message",
        {
            "message_id": event.message_id,
            "from": event.sender_id,
            "sender_name": event.sender_name,
            "preview": event.preview,
        },
    )


# ============================================================================
# REGISTRATION
# ============================================================================

HANDLERS = (
    (OrderPlaced, handle_order_placed),
    (OrderStatusChanged, handle_order_status_changed),
    (OrderCancellationRequested, handle_order_cancellation_requested),
    (TourBookingStatusChanged, handle_tour_booking_status_changed),
    (BookingRequested, handle_booking_requested),
    (BookingStatusChanged, handle_booking_status_changed),
    (BookingPaymentReceived, handle_booking_payment_received),
    (ReviewCreated, handle_review_created),
    (ReviewReplied, handle_review_replied),
    (DirectMessageSent, handle_direct_message_sent),
)


def register() -> None:
    for event_type, handler in HANDLERS:
        message_bus.register_event_handler(event_type, handler)
    logger.debug(f"Registered {len(HANDLERS)} notification handlers")

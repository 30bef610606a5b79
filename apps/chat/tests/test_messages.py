"""Tests for direct messages."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.chat.models import DirectMessage
from apps.notifications.models import Notification
from apps.users.models import User


class DirectMessageAPITests(APITestCase):
    def setUp(self) -> None:
        self.alice = User.objects.create_user(email="alice@example.com", password="AlicePass123")
        self.bob = User.objects.create_user(email="bob@example.com", password="BobPass123")
        self.carol = User.objects.create_user(email="carol@example.com", password="CarolPass123")
        self.list_url = reverse("message-list")

    def _send(self, sender, recipient, body):
        self.client.force_authenticate(sender)
        return self.client.post(self.list_url, {"recipient": recipient.id, "body": body}, format="json")

    def test_send_message_notifies_recipient(self) -> None:
        response = self._send(self.alice, self.bob, "Is the lakeside site free?")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["data"]["recipient"]["id"], self.bob.id)
        notification = Notification.objects.get(recipient=self.bob)
        self.assertEqual(notification.type, Notification.Type.GUEST_MESSAGE)
        self.assertEqual(notification.sender_id, self.alice.id)

    def test_conversation_contains_both_directions_only(self) -> None:
        self._send(self.alice, self.bob, "Hello")
        self._send(self.bob, self.alice, "Hi there")
        self._send(self.carol, self.alice, "Unrelated")

        self.client.force_authenticate(self.alice)
        response = self.client.get(self.list_url, {"with": self.bob.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m["body"] for m in response.data["data"]], ["Hello", "Hi there"])

    def test_conversation_requires_peer(self) -> None:
        self.client.force_authenticate(self.alice)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def test_cannot_message_yourself(self) -> None:
        response = self._send(self.alice, self.alice, "Note to self")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_RECIPIENT")

    def test_only_recipient_marks_read(self) -> None:
        self._send(self.alice, self.bob, "Hello")
        message = DirectMessage.objects.get()
        url = reverse("message-read", args=[message.id])

        self.client.force_authenticate(self.alice)
        by_sender = self.client.patch(url)
        self.client.force_authenticate(self.bob)
        by_recipient = self.client.patch(url)

        self.assertEqual(by_sender.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(by_recipient.status_code, status.HTTP_200_OK)
        message.refresh_from_db()
        self.assertTrue(message.is_read)
        self.assertIsNotNone(message.read_at)

    def test_requires_authentication(self) -> None:
        response = self.client.get(self.list_url, {"with": self.bob.id})

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

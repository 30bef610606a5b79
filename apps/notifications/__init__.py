"""Notifications app package.

Persists in-app notifications created in reaction to domain events and
pushes them to connected clients over Django Channels. The persisted
record is the source of truth; the real-time push is best effort.
"""

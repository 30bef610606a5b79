"""Review domain events."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class ReviewCreated(DomainEvent):
    review_id: int
    guest_id: int
    host_id: int
    property_id: int
    property_name: str
    rating: int


@dataclass(kw_only=True)
class ReviewReplied(DomainEvent):
    review_id: int
    guest_id: int
    host_id: int
    property_id: int
    property_name: str

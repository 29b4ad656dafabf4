"""Domain base classes."""

from notifyhub.core.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

__all__ = ["AggregateRoot", "DomainEvent", "Entity", "ValueObject"]

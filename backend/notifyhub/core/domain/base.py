"""Domain primitives shared by every notifyhub module.

- ValueObject: frozen after construction, equal by attributes
- Entity: equal by id
- AggregateRoot: entity whose accepted state changes bump ``version``
- DomainEvent: something that already happened, published on the event bus
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from notifyhub.core.errors import ValidationError


class ValueObject(ABC):
    """
    Immutable value, compared by its public attributes.

    Subclasses call ``super().__init__()``, validate and assign their
    attributes, then call ``self._freeze()``:

        class RecipientId(ValueObject):
            def __init__(self, value: str):
                super().__init__()
                self.validate_not_empty(value, "value")
                self.value = value.strip()
                self._freeze()
    """

    def __init__(self):
        self._frozen = False
        self._hash_cache = None

    def _freeze(self) -> None:
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False) and name != "_hash_cache":
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__delattr__(name)

    def _public_attributes(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self._public_attributes() == other._public_attributes()

    def __hash__(self) -> int:
        if self._hash_cache is None:
            values = []
            for key, value in sorted(self._public_attributes().items()):
                # content metadata is a plain dict
                if isinstance(value, dict):
                    value = tuple(sorted((k, repr(v)) for k, v in value.items()))
                values.append((key, value))
            self._hash_cache = hash((self.__class__.__name__, tuple(values)))
        return self._hash_cache

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self._public_attributes().items())
        return f"{self.__class__.__name__}({attrs})"

    @abstractmethod
    def __str__(self) -> str: ...

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """Raise ``ValidationError`` for None or a blank string."""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} cannot be empty", field=field_name)

    @classmethod
    def validate_max_length(cls, value: str, max_length: int, field_name: str) -> None:
        if len(value) > max_length:
            raise ValidationError(
                f"{field_name} cannot exceed {max_length} characters",
                field=field_name,
            )


class Entity(ABC):
    """Object with an identity that survives state changes."""

    def __init__(
        self, entity_id: UUID | None = None, created_at: datetime | None = None
    ):
        """
        Args:
            entity_id: Identity of the entity; a new UUID when omitted
            created_at: Creation time, passed when rebuilding a stored entity
        """
        self.id = entity_id or uuid4()
        self.created_at = created_at or datetime.now(UTC)
        self.updated_at = self.created_at

        if not isinstance(self.id, UUID):
            raise ValidationError("Entity ID must be a UUID")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"


class AggregateRoot(Entity):
    """
    Consistency boundary.

    State changes go through the aggregate's own methods, which check its
    invariants first; each accepted change bumps ``version``.
    """

    def __init__(
        self, entity_id: UUID | None = None, created_at: datetime | None = None
    ):
        super().__init__(entity_id, created_at)
        self._version = 1

    def increment_version(self) -> None:
        self._version += 1
        self.updated_at = datetime.now(UTC)

    @property
    def version(self) -> int:
        return self._version


class DomainEvent(ABC):
    """Base class for events published on the event bus."""

    def __init__(self):
        self.event_id = uuid4()
        self.occurred_at = datetime.now(UTC)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def __str__(self) -> str: ...


__all__ = ["AggregateRoot", "DomainEvent", "Entity", "ValueObject"]

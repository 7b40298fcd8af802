"""Base Entity class.

Entity - об'єкт з identity. Два entities з однаковими атрибутами,
але різними id - різні об'єкти (дві копії однієї угоди для різних followers).
"""

from abc import ABC


class Entity(ABC):
    """Base class for all domain entities.

    Порівнюється за ``id``. Нові entities мають ``id=None`` поки
    persistence layer не присвоїть ідентифікатор після flush.

    Example:
        >>> a = LeaderTrade(id=7, ...)
        >>> b = LeaderTrade(id=7, ...)
        >>> a == b
        True
    """

    def __init__(self, id: int | None = None) -> None:
        self._id = id

    @property
    def id(self) -> int | None:
        """Entity ID (None until persisted)."""
        return self._id

    @id.setter
    def id(self, value: int) -> None:
        if self._id is not None and self._id != value:
            raise ValueError(
                f"{self.__class__.__name__} already has id {self._id}"
            )
        self._id = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return False

        # Ще не збережені entities рівні тільки самим собі
        if self._id is None and other._id is None:
            return self is other

        return self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return hash(id(self))
        return hash((type(self).__name__, self._id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional


_EMPTY: FrozenSet[str] = frozenset()


def id_set(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Stored array of ids -> set. NULL and duplicates collapse."""
    if not values:
        return _EMPTY
    return frozenset(values)


@dataclass(frozen=True)
class RelationshipSnapshot:
    """Relationship fields of one user as read at the start of a transaction."""

    user_id: str
    exists: bool = True
    friends: FrozenSet[str] = _EMPTY
    requests_sent: FrozenSet[str] = _EMPTY
    requests_received: FrozenSet[str] = _EMPTY

    @classmethod
    def missing(cls, user_id: str) -> "RelationshipSnapshot":
        return cls(user_id=user_id, exists=False)


@dataclass(frozen=True)
class RelationshipDelta:
    """
    Set-algebra changes to one user's relationship fields.

    Removals are applied before additions, so an id present in both ends up
    present.
    """

    add_friends: FrozenSet[str] = _EMPTY
    remove_friends: FrozenSet[str] = _EMPTY
    add_sent: FrozenSet[str] = _EMPTY
    remove_sent: FrozenSet[str] = _EMPTY
    add_received: FrozenSet[str] = _EMPTY
    remove_received: FrozenSet[str] = _EMPTY

    @property
    def is_empty(self) -> bool:
        return not any((
            self.add_friends, self.remove_friends,
            self.add_sent, self.remove_sent,
            self.add_received, self.remove_received,
        ))

    @property
    def adds_anything(self) -> bool:
        return bool(self.add_friends or self.add_sent or self.add_received)

    def apply(self, snapshot: RelationshipSnapshot) -> RelationshipSnapshot:
        return replace(
            snapshot,
            friends=(snapshot.friends - self.remove_friends) | self.add_friends,
            requests_sent=(snapshot.requests_sent - self.remove_sent) | self.add_sent,
            requests_received=(snapshot.requests_received - self.remove_received) | self.add_received,
        )


NO_CHANGE = RelationshipDelta()

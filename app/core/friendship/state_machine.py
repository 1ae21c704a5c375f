"""
Friend relationship state machine.

``decide`` is a pure function of the two users' snapshots: it never touches the
database. It returns a ``Decision`` naming the outcome and the pair of deltas
the transaction has to write, one per side, so that both views of an edge
always change together.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.errors import AppError, FailedPreconditionError, NotFoundError
from app.core.friendship.snapshot import NO_CHANGE, RelationshipDelta, RelationshipSnapshot


class FriendAction(str, Enum):
    SEND = "send"
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"
    REMOVE = "remove"


class DecisionStatus(str, Enum):
    SENT = "sent"
    ALREADY_SENT = "already_sent"
    ALREADY_FRIENDS = "already_friends"
    AUTO_ACCEPTED = "auto_accepted"
    ACCEPTED = "accepted"
    NO_OP = "no_op"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    REMOVED = "removed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Decision:
    status: DecisionStatus
    actor_delta: RelationshipDelta = NO_CHANGE
    other_delta: RelationshipDelta = NO_CHANGE
    rejection: Optional[AppError] = None

    @property
    def has_writes(self) -> bool:
        return not (self.actor_delta.is_empty and self.other_delta.is_empty)


def _reject(error: AppError) -> Decision:
    return Decision(DecisionStatus.REJECTED, rejection=error)


def _one(user_id: str) -> frozenset:
    return frozenset((user_id,))


def _befriend(status: DecisionStatus, actor_id: str, other_id: str) -> Decision:
    # Drops pending edges in both directions so no pair is ever friends
    # and pending at the same time.
    return Decision(
        status,
        actor_delta=RelationshipDelta(
            add_friends=_one(other_id),
            remove_sent=_one(other_id),
            remove_received=_one(other_id),
        ),
        other_delta=RelationshipDelta(
            add_friends=_one(actor_id),
            remove_sent=_one(actor_id),
            remove_received=_one(actor_id),
        ),
    )


def _send(actor: RelationshipSnapshot, other: RelationshipSnapshot) -> Decision:
    if not other.exists:
        return _reject(NotFoundError("Target user not found"))
    if other.user_id in actor.friends or actor.user_id in other.friends:
        return Decision(DecisionStatus.ALREADY_FRIENDS)
    if other.user_id in actor.requests_sent:
        return Decision(DecisionStatus.ALREADY_SENT)
    if other.user_id in actor.requests_received or actor.user_id in other.requests_sent:
        # Crossed requests collapse into a friendship
        return _befriend(DecisionStatus.AUTO_ACCEPTED, actor.user_id, other.user_id)
    return Decision(
        DecisionStatus.SENT,
        actor_delta=RelationshipDelta(add_sent=_one(other.user_id)),
        other_delta=RelationshipDelta(add_received=_one(actor.user_id)),
    )


def _accept(actor: RelationshipSnapshot, other: RelationshipSnapshot) -> Decision:
    if not other.exists:
        return _reject(NotFoundError("Requesting user not found"))
    if other.user_id not in actor.requests_received:
        return Decision(DecisionStatus.NO_OP)
    return _befriend(DecisionStatus.ACCEPTED, actor.user_id, other.user_id)


def _decline(actor: RelationshipSnapshot, other: RelationshipSnapshot) -> Decision:
    return Decision(
        DecisionStatus.DECLINED,
        actor_delta=RelationshipDelta(remove_received=_one(other.user_id)),
        other_delta=RelationshipDelta(remove_sent=_one(actor.user_id)),
    )


def _cancel(actor: RelationshipSnapshot, other: RelationshipSnapshot) -> Decision:
    return Decision(
        DecisionStatus.CANCELLED,
        actor_delta=RelationshipDelta(remove_sent=_one(other.user_id)),
        other_delta=RelationshipDelta(remove_received=_one(actor.user_id)),
    )


def _remove(actor: RelationshipSnapshot, other: RelationshipSnapshot) -> Decision:
    return Decision(
        DecisionStatus.REMOVED,
        actor_delta=RelationshipDelta(
            remove_friends=_one(other.user_id),
            remove_sent=_one(other.user_id),
            remove_received=_one(other.user_id),
        ),
        other_delta=RelationshipDelta(
            remove_friends=_one(actor.user_id),
            remove_sent=_one(actor.user_id),
            remove_received=_one(actor.user_id),
        ),
    )


_RULES = {
    FriendAction.SEND: _send,
    FriendAction.ACCEPT: _accept,
    FriendAction.DECLINE: _decline,
    FriendAction.CANCEL: _cancel,
    FriendAction.REMOVE: _remove,
}


def decide(
    action: FriendAction,
    actor: RelationshipSnapshot,
    other: RelationshipSnapshot,
) -> Decision:
    """
    Compute the outcome of ``action`` taken by ``actor`` towards ``other``.

    Args:
        action: The requested relationship action
        actor: Snapshot of the calling user
        other: Snapshot of the counterpart

    Returns:
        Decision: status tag plus the deltas to write on each side. Rejected
        decisions carry the error to raise and no deltas.
    """
    if actor.user_id == other.user_id:
        return _reject(FailedPreconditionError("You cannot do this with yourself"))
    return _RULES[FriendAction(action)](actor, other)

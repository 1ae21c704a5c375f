from app.core.friendship.identity import resolve_target_id
from app.core.friendship.snapshot import RelationshipDelta, RelationshipSnapshot
from app.core.friendship.state_machine import Decision, DecisionStatus, FriendAction, decide
from app.core.friendship.store import RelationshipStore
from app.core.friendship.transaction import TransactionConflictError, run_friend_action

__all__ = [
    "resolve_target_id",
    "RelationshipDelta",
    "RelationshipSnapshot",
    "Decision",
    "DecisionStatus",
    "FriendAction",
    "decide",
    "RelationshipStore",
    "TransactionConflictError",
    "run_friend_action",
]

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.friendship.snapshot import RelationshipDelta, RelationshipSnapshot, id_set
from app.models import User

logger = logging.getLogger(__name__)


def _snapshot(user_id: str, user: Optional[User]) -> RelationshipSnapshot:
    if user is None:
        return RelationshipSnapshot.missing(user_id)
    return RelationshipSnapshot(
        user_id=user_id,
        friends=id_set(user.friends),
        requests_sent=id_set(user.requests_sent),
        requests_received=id_set(user.requests_received),
    )


def _as_column(ids) -> List[str]:
    return sorted(ids)


class RelationshipStore:
    """
    Reads and writes the relationship fields of a pair of users inside the
    transaction of ``db``.

    The rows loaded by ``read_pair`` are the ones ``write_pair`` updates, so the
    UPDATE carries the version seen at read time. A commit by anyone else in
    between makes the flush fail with ``StaleDataError``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._rows: Dict[str, Optional[User]] = {}

    async def read_pair(
        self, user_id: str, other_id: str
    ) -> Tuple[RelationshipSnapshot, RelationshipSnapshot]:
        stmt = (
            select(User)
            .where(User.id.in_([user_id, other_id]))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        found = {user.id: user for user in result.scalars().all()}
        self._rows = {user_id: found.get(user_id), other_id: found.get(other_id)}
        return _snapshot(user_id, self._rows[user_id]), _snapshot(other_id, self._rows[other_id])

    async def write_pair(
        self,
        user_id: str,
        delta: RelationshipDelta,
        other_id: str,
        other_delta: RelationshipDelta,
    ) -> None:
        """Stage both deltas and flush them as one unit of work."""
        self._stage(user_id, delta)
        self._stage(other_id, other_delta)
        await self.db.flush()

    def _stage(self, user_id: str, delta: RelationshipDelta) -> None:
        if user_id not in self._rows:
            raise RuntimeError(f"write_pair called for {user_id} before read_pair")

        user = self._rows[user_id]
        if user is None:
            if not delta.adds_anything:
                return
            logger.info(f"Creating relationship record for {user_id}")
            user = User(id=user_id)
            self.db.add(user)
            self._rows[user_id] = user

        before = _snapshot(user_id, user)
        after = delta.apply(before)
        if after == before:
            return

        # New list objects, so the JSON columns are flagged as changed
        user.friends = _as_column(after.friends)
        user.requests_sent = _as_column(after.requests_sent)
        user.requests_received = _as_column(after.requests_received)

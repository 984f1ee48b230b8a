'''
The last-known-good copy of the four collections.

Every collection is replaced as a whole when the change feed reports it
changed; nothing is patched incrementally. Weekly summaries are memoised on
(period key, collection versions), so a change to students, payments or
expenses, or a different week, always leads to a fresh computation.
'''
from typing import Any, Optional

from fastapi.requests import HTTPConnection
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.logger import log
from ..core import accounting
from ..database import models as db_models
from ..database.db_enums import EntityKind
from ..models import finance as finance_models
from ..models import roster as roster_models
from .change_feed import ChangeFeed

# collection -> (ORM model, read model used to detach the rows from the session)
COLLECTIONS: dict[EntityKind, tuple[Any, Any]] = {
    EntityKind.CLASSES: (db_models.Classes, roster_models.ClassRead),
    EntityKind.STUDENTS: (db_models.Students, roster_models.StudentRead),
    EntityKind.PAYMENTS: (db_models.Payments, finance_models.PaymentRead),
    EntityKind.EXPENSES: (db_models.Expenses, finance_models.ExpenseRead),
}

SUMMARY_INPUTS = (EntityKind.STUDENTS, EntityKind.PAYMENTS, EntityKind.EXPENSES)


class LedgerSnapshot:
    """Full-collection snapshot refreshed lazily from change events."""

    def __init__(self, change_feed: Optional[ChangeFeed] = None):
        self.records: dict[EntityKind, list[Any]] = {kind: [] for kind in EntityKind}
        self.versions: dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._stale: set[EntityKind] = set(EntityKind)
        self._summaries: dict[tuple, finance_models.WeeklySummary] = {}
        self._unsubscribe = change_feed.subscribe(self.mark_stale) if change_feed else None

    @classmethod
    async def load(cls, db: AsyncSession) -> "LedgerSnapshot":
        """A standalone snapshot read entirely through the given session."""
        snapshot = cls()
        await snapshot.refresh(db)
        return snapshot

    # --- Collections ---

    @property
    def classes(self) -> list[roster_models.ClassRead]:
        return self.records[EntityKind.CLASSES]

    @property
    def students(self) -> list[roster_models.StudentRead]:
        return self.records[EntityKind.STUDENTS]

    @property
    def payments(self) -> list[finance_models.PaymentRead]:
        return self.records[EntityKind.PAYMENTS]

    @property
    def expenses(self) -> list[finance_models.ExpenseRead]:
        return self.records[EntityKind.EXPENSES]

    @property
    def is_stale(self) -> bool:
        return bool(self._stale)

    def mark_stale(self, kind: EntityKind) -> None:
        self._stale.add(EntityKind(kind))

    async def refresh(self, db: AsyncSession) -> None:
        """Re-fetches every stale collection and replaces it wholesale."""
        for kind in sorted(self._stale):
            orm_model, read_model = COLLECTIONS[kind]
            # cleared before the fetch so a change committed while it runs marks the kind again
            self._stale.discard(kind)
            try:
                stmt = select(orm_model).order_by(orm_model.created_at.asc())
                rows = (await db.execute(stmt)).scalars().all()
            except Exception as e:
                self._stale.add(kind)
                log.error(f"Failed to refresh '{kind.value}', keeping last snapshot: {e}", exc_info=True)
                raise
            self.records[kind] = [read_model.model_validate(row) for row in rows]
            self.versions[kind] += 1
            log.info(f"Snapshot of '{kind.value}' replaced ({len(rows)} rows, v{self.versions[kind]}).")

    # --- Aggregates ---

    def _summary_key(self, period: finance_models.WeekPeriod) -> tuple:
        return (period.key, *(self.versions[kind] for kind in SUMMARY_INPUTS))

    def summary(self, period: finance_models.WeekPeriod) -> finance_models.WeeklySummary:
        """
        Weekly summary for the current snapshot. Call refresh() first when
        is_stale is set.
        """
        key = self._summary_key(period)
        cached = self._summaries.get(key)
        if cached is not None:
            return cached

        # older versions can never be asked for again
        self._summaries = {k: v for k, v in self._summaries.items() if k[1:] == key[1:]}
        summary = accounting.summarize_week(self.students, self.payments, self.expenses, period)
        self._summaries[key] = summary
        return summary

    def close(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None


def get_ledger_snapshot(connection: HTTPConnection) -> LedgerSnapshot:
    """FastAPI dependency returning the snapshot created by the app's lifespan."""
    return connection.app.state.ledger_snapshot

"""SQLAlchemy implementation of PnlCacheRepository."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from portfolio_analytics.domain.models import PnlCacheEntry
from portfolio_analytics.repositories.sqlalchemy.orm_models import PnlHistoryCacheORM


class SqlAlchemyPnlCacheRepository:
    """SQLAlchemy-backed PnL cache keyed by (portfolio_id, date)."""

    def __init__(self, db: Session):
        self._db = db

    def upsert(self, entry: PnlCacheEntry) -> PnlCacheEntry:
        """Insert or update the entry for (portfolio_id, date)."""
        orm_entry = (
            self._db.query(PnlHistoryCacheORM)
            .filter(
                PnlHistoryCacheORM.portfolio_id == entry.portfolio_id,
                PnlHistoryCacheORM.date == entry.date,
            )
            .first()
        )

        if orm_entry:
            orm_entry.pnl = entry.pnl
            orm_entry.calculated_at = entry.calculated_at or datetime.utcnow()
        else:
            orm_entry = PnlHistoryCacheORM(
                portfolio_id=entry.portfolio_id,
                date=entry.date,
                pnl=entry.pnl,
                calculated_at=entry.calculated_at or datetime.utcnow(),
            )
            self._db.add(orm_entry)

        self._db.commit()
        self._db.refresh(orm_entry)
        return self._to_domain(orm_entry)

    def get_series(
        self,
        portfolio_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[PnlCacheEntry]:
        """Cached entries for a portfolio, ascending by date."""
        query = self._db.query(PnlHistoryCacheORM).filter(
            PnlHistoryCacheORM.portfolio_id == portfolio_id
        )
        if date_from:
            query = query.filter(PnlHistoryCacheORM.date >= date_from)
        if date_to:
            query = query.filter(PnlHistoryCacheORM.date <= date_to)
        query = query.order_by(PnlHistoryCacheORM.date)
        return [self._to_domain(row) for row in query.all()]

    def delete_except(
        self,
        portfolio_id: str,
        date_from: date,
        date_to: date,
        keep: set[date],
    ) -> int:
        """Delete entries in [date_from, date_to] whose date is not in ``keep``."""
        query = self._db.query(PnlHistoryCacheORM).filter(
            PnlHistoryCacheORM.portfolio_id == portfolio_id,
            PnlHistoryCacheORM.date >= date_from,
            PnlHistoryCacheORM.date <= date_to,
        )
        if keep:
            query = query.filter(PnlHistoryCacheORM.date.notin_(keep))
        deleted = query.delete(synchronize_session=False)
        self._db.commit()
        return deleted

    @staticmethod
    def _to_domain(orm: PnlHistoryCacheORM) -> PnlCacheEntry:
        """Convert ORM row to domain model."""
        return PnlCacheEntry(
            portfolio_id=orm.portfolio_id,
            date=orm.date,
            pnl=Decimal(str(orm.pnl)) if orm.pnl is not None else Decimal("0"),
            calculated_at=orm.calculated_at,
        )

"""SQLAlchemy implementation of PriceHistoryRepository."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from portfolio_analytics.domain.models import PricePoint
from portfolio_analytics.repositories.sqlalchemy.orm_models import PriceHistoryORM


class SqlAlchemyPriceHistoryRepository:
    """SQLAlchemy-backed store of daily closes and FX rates."""

    def __init__(self, db: Session):
        self._db = db

    def get_series(
        self,
        ticker: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[date, Decimal]:
        """Closes for a ticker keyed by date, ascending."""
        query = self._db.query(PriceHistoryORM).filter(PriceHistoryORM.ticker == ticker)
        if start_date:
            query = query.filter(PriceHistoryORM.date >= start_date)
        if end_date:
            query = query.filter(PriceHistoryORM.date <= end_date)
        query = query.order_by(PriceHistoryORM.date)
        return {row.date: Decimal(str(row.close)) for row in query.all()}

    def earliest_date(self, ticker: str) -> Optional[date]:
        """First stored date for a ticker, if any."""
        return (
            self._db.query(func.min(PriceHistoryORM.date))
            .filter(PriceHistoryORM.ticker == ticker)
            .scalar()
        )

    def latest_date(self, ticker: str) -> Optional[date]:
        """Last stored date for a ticker, if any."""
        return (
            self._db.query(func.max(PriceHistoryORM.date))
            .filter(PriceHistoryORM.ticker == ticker)
            .scalar()
        )

    def upsert_many(self, points: Iterable[PricePoint]) -> int:
        """Insert or overwrite closes; returns number of rows written."""
        written = 0
        for point in points:
            # merge() keys on the (ticker, date) primary key
            self._db.merge(
                PriceHistoryORM(ticker=point.ticker, date=point.date, close=point.close)
            )
            written += 1
        self._db.commit()
        return written

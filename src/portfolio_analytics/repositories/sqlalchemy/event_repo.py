"""SQLAlchemy implementation of EventRepository."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from portfolio_analytics.domain.models import FinancialEvent, EventType
from portfolio_analytics.repositories.sqlalchemy.orm_models import FinancialEventORM


class SqlAlchemyEventRepository:
    """SQLAlchemy-backed corporate event repository."""

    def __init__(self, db: Session):
        self._db = db

    def find_system_event(
        self,
        ticker: str,
        event_type: EventType,
        event_date: date,
    ) -> Optional[FinancialEvent]:
        """Find the system-synced event (user_id NULL) for a ticker/type/date."""
        orm_event = self._find_orm(ticker, event_type, event_date)
        return self._to_domain(orm_event) if orm_event else None

    def upsert_system_event(self, event: FinancialEvent) -> FinancialEvent:
        """Insert a system-synced event or update the existing one."""
        orm_event = self._find_orm(event.ticker, event.event_type, event.event_date)

        if orm_event:
            orm_event.status = event.status
            orm_event.title = event.title
            orm_event.description = event.description
            orm_event.estimated_eps = event.estimated_eps
            orm_event.dividend_amount = event.dividend_amount
            orm_event.updated_at = datetime.utcnow()
        else:
            orm_event = FinancialEventORM(
                user_id=None,
                ticker=event.ticker,
                event_type=event.event_type,
                event_date=event.event_date,
                title=event.title,
                description=event.description,
                is_custom=False,
                status=event.status,
                estimated_eps=event.estimated_eps,
                dividend_amount=event.dividend_amount,
            )
            self._db.add(orm_event)

        self._db.commit()
        self._db.refresh(orm_event)
        return self._to_domain(orm_event)

    def list_by_ticker(self, ticker: str) -> list[FinancialEvent]:
        """List events for a ticker ordered by date."""
        rows = (
            self._db.query(FinancialEventORM)
            .filter(FinancialEventORM.ticker == ticker)
            .order_by(FinancialEventORM.event_date, FinancialEventORM.id)
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def _find_orm(
        self,
        ticker: str,
        event_type: EventType,
        event_date: date,
    ) -> Optional[FinancialEventORM]:
        return (
            self._db.query(FinancialEventORM)
            .filter(
                FinancialEventORM.ticker == ticker,
                FinancialEventORM.event_type == event_type,
                FinancialEventORM.event_date == event_date,
                FinancialEventORM.user_id.is_(None),
            )
            .first()
        )

    @staticmethod
    def _to_domain(orm: FinancialEventORM) -> FinancialEvent:
        """Convert ORM model to domain model."""
        return FinancialEvent(
            event_id=orm.id,
            ticker=orm.ticker,
            event_type=orm.event_type,
            event_date=orm.event_date,
            title=orm.title,
            description=orm.description,
            status=orm.status,
            estimated_eps=Decimal(str(orm.estimated_eps)) if orm.estimated_eps is not None else None,
            dividend_amount=Decimal(str(orm.dividend_amount)) if orm.dividend_amount is not None else None,
            user_id=orm.user_id,
            is_custom=bool(orm.is_custom),
            updated_at=orm.updated_at,
        )

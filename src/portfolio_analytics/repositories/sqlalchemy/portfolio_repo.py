"""SQLAlchemy implementation of PortfolioRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from portfolio_analytics.domain.models import Portfolio
from portfolio_analytics.repositories.sqlalchemy.orm_models import PortfolioORM


class SqlAlchemyPortfolioRepository:
    """SQLAlchemy-backed portfolio repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        orm_portfolio = PortfolioORM(
            portfolio_id=portfolio.portfolio_id,
            name=portfolio.name,
            created_at=portfolio.created_at or datetime.utcnow(),
        )
        self._db.add(orm_portfolio)
        self._db.commit()
        self._db.refresh(orm_portfolio)
        return self._to_domain(orm_portfolio)

    def get_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        """Retrieve portfolio by ID."""
        orm_portfolio = self._db.query(PortfolioORM).filter(
            PortfolioORM.portfolio_id == portfolio_id
        ).first()
        return self._to_domain(orm_portfolio) if orm_portfolio else None

    def list_ids(self) -> list[str]:
        """List the IDs of all portfolios."""
        rows = self._db.query(PortfolioORM.portfolio_id).order_by(PortfolioORM.created_at).all()
        return [row.portfolio_id for row in rows]

    @staticmethod
    def _to_domain(orm: PortfolioORM) -> Portfolio:
        """Convert ORM model to domain model."""
        return Portfolio(
            portfolio_id=orm.portfolio_id,
            name=orm.name,
            created_at=orm.created_at,
        )

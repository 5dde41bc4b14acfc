"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Boolean,
    Text,
    ForeignKey,
    Numeric,
    UniqueConstraint,
    Index,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from portfolio_analytics.repositories.sqlalchemy.database import Base
from portfolio_analytics.domain.models.enums import TransactionType, EventType


class PortfolioORM(Base):
    """SQLAlchemy model for Portfolio."""

    __tablename__ = "portfolios"

    portfolio_id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    transactions = relationship("TransactionORM", back_populates="portfolio")


class TransactionORM(Base):
    """SQLAlchemy model for Transaction (ledger entry)."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_portfolio_time", "portfolio_id", "txn_time"),
    )

    # Autoincrement id doubles as insertion order
    txn_id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(String(36), ForeignKey("portfolios.portfolio_id"), nullable=False)
    txn_time = Column(DateTime, nullable=False)
    txn_type = Column(SqlEnum(TransactionType), nullable=False)
    ticker = Column(String(20), nullable=True)
    quantity = Column(Numeric(precision=18, scale=8), default=Decimal("0"))
    price = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    currency = Column(String(3), nullable=True)
    fx_rate = Column(Numeric(precision=18, scale=8), default=Decimal("1"))
    fees = Column(Numeric(precision=18, scale=2), default=Decimal("0"))

    portfolio = relationship("PortfolioORM", back_populates="transactions")


class PriceHistoryORM(Base):
    """SQLAlchemy model for stored daily closes (tickers and FX pairs)."""

    __tablename__ = "price_history"

    ticker = Column(String(20), primary_key=True)
    date = Column(Date, primary_key=True)
    close = Column(Numeric(precision=18, scale=6), nullable=False)


class PnlHistoryCacheORM(Base):
    """SQLAlchemy model for the per-day unrealized PnL cache."""

    __tablename__ = "pnl_history_cache"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "date", name="uq_pnl_history_portfolio_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(String(36), nullable=False, index=True)
    date = Column(Date, nullable=False)
    pnl = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))
    calculated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class FinancialEventORM(Base):
    """SQLAlchemy model for corporate calendar events."""

    __tablename__ = "financial_events"
    __table_args__ = (
        Index("ix_financial_events_lookup", "ticker", "event_type", "event_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=True)
    ticker = Column(String(20), nullable=False)
    event_type = Column(SqlEnum(EventType), nullable=False)
    event_date = Column(Date, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_custom = Column(Boolean, default=False)
    status = Column(String(20), nullable=False, default="confirmed")
    estimated_eps = Column(Numeric(precision=18, scale=4), nullable=True)
    dividend_amount = Column(Numeric(precision=18, scale=4), nullable=True)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)

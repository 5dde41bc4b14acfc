"""SQLAlchemy implementation of TransactionRepository."""

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from portfolio_analytics.domain.models import Transaction
from portfolio_analytics.repositories.sqlalchemy.orm_models import TransactionORM


class SqlAlchemyTransactionRepository:
    """SQLAlchemy-backed transaction repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        orm_txn = TransactionORM(
            portfolio_id=transaction.portfolio_id,
            txn_time=transaction.txn_time,
            txn_type=transaction.txn_type,
            ticker=transaction.ticker,
            quantity=transaction.quantity,
            price=transaction.price,
            currency=transaction.currency,
            fx_rate=transaction.fx_rate,
            fees=transaction.fees,
        )
        self._db.add(orm_txn)
        self._db.commit()
        self._db.refresh(orm_txn)
        return self._to_domain(orm_txn)

    def list_by_portfolio(self, portfolio_id: str) -> list[Transaction]:
        """List all transactions of a portfolio, ordered by time then insertion."""
        query = (
            self._db.query(TransactionORM)
            .filter(TransactionORM.portfolio_id == portfolio_id)
            .order_by(TransactionORM.txn_time, TransactionORM.txn_id)
        )
        return [self._to_domain(t) for t in query.all()]

    def list_tickers(self, portfolio_id: str) -> list[str]:
        """Distinct upper-cased tickers ever traded in the portfolio."""
        rows = (
            self._db.query(func.upper(TransactionORM.ticker).label("ticker"))
            .filter(
                TransactionORM.portfolio_id == portfolio_id,
                TransactionORM.ticker.isnot(None),
            )
            .distinct()
            .all()
        )
        return sorted(row.ticker for row in rows if row.ticker)

    def list_currencies(self, portfolio_id: str) -> list[str]:
        """Distinct upper-cased trade currencies used in the portfolio."""
        rows = (
            self._db.query(func.upper(TransactionORM.currency).label("currency"))
            .filter(
                TransactionORM.portfolio_id == portfolio_id,
                TransactionORM.currency.isnot(None),
            )
            .distinct()
            .all()
        )
        return sorted(row.currency for row in rows if row.currency)

    @staticmethod
    def _to_domain(orm: TransactionORM) -> Transaction:
        """Convert ORM model to domain model."""
        return Transaction(
            txn_id=orm.txn_id,
            portfolio_id=orm.portfolio_id,
            txn_time=orm.txn_time,
            txn_type=orm.txn_type,
            ticker=orm.ticker,
            quantity=Decimal(str(orm.quantity)) if orm.quantity is not None else Decimal("0"),
            price=Decimal(str(orm.price)) if orm.price is not None else Decimal("0"),
            currency=orm.currency,
            fx_rate=Decimal(str(orm.fx_rate)) if orm.fx_rate is not None else Decimal("1"),
            fees=Decimal(str(orm.fees)) if orm.fees is not None else Decimal("0"),
        )

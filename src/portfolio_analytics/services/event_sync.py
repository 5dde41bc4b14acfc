"""Corporate calendar event synchronization."""

import logging
from decimal import Decimal
from typing import Optional

from dateutil import parser as date_parser

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.core.exceptions import UpstreamDataError
from portfolio_analytics.core.timezone import today_local
from portfolio_analytics.domain.models import EventType, FinancialEvent
from portfolio_analytics.domain.views import CalendarEvent
from portfolio_analytics.providers.reference_data_provider import ReferenceDataProvider
from portfolio_analytics.repositories.protocols import EventRepository, PortfolioRepository
from portfolio_analytics.services.position_reconstructor import PositionReconstructor
from portfolio_analytics.services.sync_orchestrator import (
    CancellationToken,
    CycleResult,
    SyncOrchestrator,
)

logger = logging.getLogger(__name__)


def map_event_type(event: CalendarEvent) -> Optional[EventType]:
    """Map a provider calendar entry to a stored event type; None means skip."""
    if event.event_type == "EARNINGS_RELEASE":
        return EventType.EARNINGS
    if event.event_type == "DIVIDEND" and "Ex-" in (event.title or ""):
        return EventType.EX_DIVIDEND
    return None


def _optional_decimal(value: Optional[float]) -> Optional[Decimal]:
    return Decimal(str(value)) if value else None


class CorporateEventSync:
    """
    Keeps the financial_events table in step with the provider calendar.

    The universe is the configured watch-list plus every ticker open in any
    portfolio today. Runs through a SyncOrchestrator so it inherits the
    batching, throttling and retry behaviour.
    """

    def __init__(
        self,
        provider: ReferenceDataProvider,
        event_repo: EventRepository,
        portfolio_repo: PortfolioRepository,
        reconstructor: PositionReconstructor,
        watch_list: Optional[list[str]] = None,
        orchestrator: Optional[SyncOrchestrator] = None,
    ):
        self._provider = provider
        self._event_repo = event_repo
        self._portfolio_repo = portfolio_repo
        self._reconstructor = reconstructor
        self._watch_list = [t.upper() for t in (watch_list or get_settings().watch_list)]
        self._orchestrator = orchestrator or SyncOrchestrator(
            name="EventSync",
            worker=self.sync_ticker,
            universe=self.get_all_tickers,
        )

    @property
    def orchestrator(self) -> SyncOrchestrator:
        return self._orchestrator

    async def get_all_tickers(self) -> list[str]:
        """Watch-list plus tickers held in any portfolio; watch-list alone if the ledger fails."""
        tickers = list(self._watch_list)
        try:
            today = today_local()
            held: set[str] = set()
            for portfolio_id in self._portfolio_repo.list_ids():
                held |= self._reconstructor.open_tickers(portfolio_id, today)
        except Exception as e:
            logger.error("Error reading portfolio tickers, using watch-list only: %s", e)
            return tickers

        tickers.extend(sorted(held - set(tickers)))
        return tickers

    async def sync_ticker(self, ticker: str) -> int:
        """
        Fetch, filter and upsert confirmed events for one ticker.

        Returns the number of events written. Raises UpstreamDataError when
        the provider fails so the orchestrator counts the attempt.
        """
        try:
            events = await self._provider.get_calendar_events(ticker)
        except Exception as e:
            raise UpstreamDataError("get_calendar_events", ticker, str(e)) from e

        synced = 0
        for event in events:
            if not event.is_confirmed:
                continue
            event_type = map_event_type(event)
            if event_type is None:
                continue

            self._event_repo.upsert_system_event(
                FinancialEvent(
                    ticker=ticker.upper(),
                    event_type=event_type,
                    event_date=date_parser.parse(event.date).date(),
                    title=event.title,
                    description=event.description,
                    status="confirmed",
                    estimated_eps=_optional_decimal(event.eps),
                    dividend_amount=_optional_decimal(event.dividend),
                )
            )
            synced += 1

        logger.info("%s: %d events synced", ticker, synced)
        return synced

    async def run_full_cycle(
        self,
        batch_size: Optional[int] = None,
        interval_seconds: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CycleResult:
        """Sync the whole universe with the configured pacing."""
        settings = get_settings()
        return await self._orchestrator.run_full_cycle(
            batch_size or settings.sync_batch_size,
            settings.sync_interval_seconds if interval_seconds is None else interval_seconds,
            cancel_token,
        )

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from app.core.config import settings
from app.core.errors import Unauthenticated
from app.models.parsing import parse_model
from app.models.transaction import TransactionCreate, TransactionFilters, TransactionInDB, TransactionUpdate
from app.models.window import WindowSpec
from app.services.ledger_query import LedgerStore, fetch_by_owner_and_window
from app.utils.analyzer import LedgerAnalyzer
from app.utils.time_window import TimeWindow, resolve_window, utc_today

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Transaction lifecycle plus the three analysis operations.

    The owner id is always passed in explicitly; the service keeps no
    per-request state, so one instance serves every caller.
    """

    def __init__(
        self,
        store: LedgerStore,
        analyzer: Optional[LedgerAnalyzer] = None,
        today: Callable[[], date] = utc_today,
        default_page_size: int = settings.DEFAULT_PAGE_SIZE,
        default_window_days: int = settings.DEFAULT_WINDOW_DAYS,
    ) -> None:
        self.store = store
        self.analyzer = analyzer or LedgerAnalyzer(
            top_categories_limit=settings.TOP_CATEGORIES_LIMIT,
            recent_limit=settings.RECENT_TRANSACTIONS_LIMIT,
        )
        self._today = today
        self._default_page_size = default_page_size
        self._default_window_days = default_window_days

    # ---- record lifecycle -------------------------------------------------

    def create(self, data: Mapping[str, Any], owner_id: str) -> Dict[str, Any]:
        _require_owner(owner_id)
        payload = parse_model(TransactionCreate, data)

        record = TransactionInDB(
            id=uuid4().hex,
            user_id=owner_id,
            type=payload.type,
            category=payload.category,
            amount=payload.amount,
            note=payload.note,
            date=(payload.date or self._today()).isoformat(),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        stored = self.store.insert(record.model_dump())
        logger.info(f"Created transaction {record.id} for user {owner_id}")
        return stored

    def read(self, transaction_id: str, owner_id: str) -> Dict[str, Any]:
        _require_owner(owner_id)
        return self.store.select_one(transaction_id, owner_id)

    def update(self, transaction_id: str, data: Mapping[str, Any], owner_id: str) -> Dict[str, Any]:
        _require_owner(owner_id)
        patch = parse_model(TransactionUpdate, data).to_patch()
        updated = self.store.update(transaction_id, owner_id, patch)
        if patch:
            logger.info(f"Updated transaction {transaction_id} fields {sorted(patch)} for user {owner_id}")
        return updated

    def delete(self, transaction_id: str, owner_id: str) -> None:
        _require_owner(owner_id)
        self.store.delete(transaction_id, owner_id)
        logger.info(f"Deleted transaction {transaction_id} for user {owner_id}")

    def list(self, owner_id: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        _require_owner(owner_id)
        filters = parse_model(TransactionFilters, params or {})

        records = self.store.select_by_owner(
            owner_id,
            type=filters.type,
            category=filters.category,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )

        if filters.offset is not None:
            page_size = filters.limit or self._default_page_size
            return records[filters.offset:filters.offset + page_size]
        if filters.limit is not None:
            return records[:filters.limit]
        return records

    # ---- analysis ---------------------------------------------------------

    def resolve(self, params: Optional[Mapping[str, Any]] = None) -> TimeWindow:
        spec = parse_model(WindowSpec, params or {})
        return resolve_window(spec, today=self._today(), default_days=self._default_window_days)

    def _window_records(self, owner_id: str, window: TimeWindow, **filters) -> List[Dict[str, Any]]:
        records = fetch_by_owner_and_window(
            self.store, owner_id, window.start_date, window.end_date, **filters
        )
        logger.info(
            f"Found {len(records)} transactions for user {owner_id} "
            f"between {window.start_date} and {window.end_date}"
        )
        return records

    def spending_summary(self, owner_id: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        _require_owner(owner_id)
        window = self.resolve(params)
        records = self._window_records(owner_id, window)
        return {
            "success": True,
            "period": window.to_dict(),
            **self.analyzer.summarize(records),
        }

    def spending_analysis(self, owner_id: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        _require_owner(owner_id)
        window = self.resolve(params)
        records = self._window_records(owner_id, window)
        return {
            "success": True,
            "period": window.to_dict(),
            **self.analyzer.analyze(records),
        }

    def category_analysis(self, owner_id: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        _require_owner(owner_id)
        params = dict(params or {})
        category = (params.pop("category", None) or "").strip() or None
        window = self.resolve(params)
        records = self._window_records(owner_id, window, type="expense", category=category)
        return {
            "success": True,
            "period": window.to_dict(),
            **self.analyzer.category_analysis(records, category=category),
        }


def _require_owner(owner_id: str) -> None:
    if not owner_id:
        raise Unauthenticated("User ID is required")

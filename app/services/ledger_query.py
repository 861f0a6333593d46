"""
Storage contract used by the ledger service.

Any store must treat ``owner_id`` as a hard predicate: a record owned by
somebody else is indistinguishable from a missing one.
"""
from typing import Any, Dict, List, Optional, Protocol

from app.core.errors import Unauthenticated


class LedgerStore(Protocol):
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def select_by_owner(
        self,
        owner_id: str,
        type: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Matching records, newest date first."""
        ...

    def select_one(self, transaction_id: str, owner_id: str) -> Dict[str, Any]:
        ...

    def update(self, transaction_id: str, owner_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete(self, transaction_id: str, owner_id: str) -> Dict[str, Any]:
        ...


def fetch_by_owner_and_window(
    store: LedgerStore,
    owner_id: str,
    start_date: str,
    end_date: str,
    type: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Dict[str, Any]]:
    if not owner_id:
        raise Unauthenticated("User ID is required to fetch transactions")

    return store.select_by_owner(
        owner_id,
        type=type,
        category=category,
        start_date=start_date,
        end_date=end_date,
    )

from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.core.security import get_current_user_id
from app.db.dynamo import DynamoTransactionStore
from app.services.ledger import LedgerService

router = APIRouter()


@lru_cache()
def get_ledger_service() -> LedgerService:
    return LedgerService(DynamoTransactionStore())


def window_params(
    days: Optional[str] = None,
    weeks: Optional[str] = None,
    months: Optional[str] = None,
    years: Optional[str] = None,
    period: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> Dict[str, Any]:
    """Raw window query parameters; parsing happens in the service."""
    params = {
        "days": days,
        "weeks": weeks,
        "months": months,
        "years": years,
        "period": period,
        "startDate": start_date,
        "endDate": end_date,
    }
    return {k: v for k, v in params.items() if v is not None}


# Analysis endpoints are registered before /{transaction_id} so the paths don't collide

@router.get("/analysis/summary")
def get_spending_summary(
    window: Dict[str, Any] = Depends(window_params),
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    return service.spending_summary(user_id, window)


@router.get("/analysis/spending")
def get_spending_analysis(
    window: Dict[str, Any] = Depends(window_params),
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    return service.spending_analysis(user_id, window)


@router.get("/analysis/categories")
def get_category_analysis(
    category: Optional[str] = None,
    window: Dict[str, Any] = Depends(window_params),
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    params = dict(window)
    if category is not None:
        params["category"] = category
    return service.category_analysis(user_id, params)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    transaction = service.create(payload, user_id)
    return {
        "success": True,
        "message": "Transaction created successfully",
        "data": transaction,
    }


@router.get("/")
def list_transactions(
    type: Optional[str] = None,
    category: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    params = {
        "type": type,
        "category": category,
        "startDate": start_date,
        "endDate": end_date,
        "limit": limit,
        "offset": offset,
    }
    transactions = service.list(user_id, {k: v for k, v in params.items() if v is not None})
    return {
        "success": True,
        "message": "Transactions retrieved successfully",
        "data": transactions,
        "count": len(transactions),
    }


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    return {
        "success": True,
        "message": "Transaction retrieved successfully",
        "data": service.read(transaction_id, user_id),
    }


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: str,
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    return {
        "success": True,
        "message": "Transaction updated successfully",
        "data": service.update(transaction_id, payload, user_id),
    }


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> Dict:
    service.delete(transaction_id, user_id)
    return {
        "success": True,
        "message": "Transaction deleted successfully",
    }

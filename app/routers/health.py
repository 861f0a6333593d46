"""
Health Check Router
Liveness plus a DynamoDB connectivity check
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.errors import PersistenceFailure
from app.routers.transactions import get_ledger_service
from app.services.ledger import LedgerService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/status")
def services_status(service: LedgerService = Depends(get_ledger_service)):
    """
    Check that the transactions table is reachable.
    """
    dynamodb_status = {
        "connected": False,
        "table": settings.DYNAMO_TRANSACTIONS_TABLE,
        "region": settings.DYNAMO_REGION,
        "error": None
    }
    try:
        service.store.ping()
        dynamodb_status["connected"] = True
    except PersistenceFailure as e:
        dynamodb_status["error"] = e.message
        logger.error(f"DynamoDB check failed: {e.message}")

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {"dynamodb": dynamodb_status},
        "overall_status": "healthy" if dynamodb_status["connected"] else "degraded",
    }

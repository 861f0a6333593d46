"""
Ledger error taxonomy.

Every failure a ledger operation can report is one of these. The FastAPI app
maps them onto HTTP responses in app.main.
"""
from fastapi import status


class LedgerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed or missing input. Raised before the store is touched."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(LedgerError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(LedgerError):
    """
    The record is absent or belongs to someone else. Both cases produce the
    same error so callers cannot learn which ids other owners hold.
    """

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Transaction not found"):
        super().__init__(message)


class PersistenceFailure(LedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

import datetime as dt
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

TRANSACTION_TYPES = ("income", "expense")

MIN_AMOUNT = 1e-130
MAX_AMOUNT = 1e126


def _check_type(value):
    if value not in TRANSACTION_TYPES:
        raise ValueError('Type must be either "income" or "expense"')
    return value


def _check_amount(value):
    # bool is an int subclass; reject it along with strings
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Amount must be a positive number")
    # DynamoDB numbers stop at 1e-130 and just under 1e126; NaN fails both sides
    if not MIN_AMOUNT <= value < MAX_AMOUNT:
        raise ValueError("Amount must be a positive number")
    return value


def _check_category(value):
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Category must be a non-empty string")
    return value.strip()


def _clean_note(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Note must be a string")
    return value.strip() or None


TransactionType = Annotated[Literal["income", "expense"], BeforeValidator(_check_type)]
PositiveAmount = Annotated[float, BeforeValidator(_check_amount)]
Category = Annotated[str, BeforeValidator(_check_category)]
Note = Annotated[Optional[str], BeforeValidator(_clean_note)]


class TransactionCreate(BaseModel):
    type: TransactionType
    category: Category
    amount: PositiveAmount
    note: Note = None
    date: Optional[dt.date] = None  # defaults to today in the service


class TransactionUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are validated and
    written; ``to_patch`` returns exactly those fields.
    """

    type: Optional[TransactionType] = None
    category: Optional[Category] = None
    amount: Optional[PositiveAmount] = None
    note: Note = None
    date: Optional[dt.date] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            for field in ("type", "category", "amount", "date"):
                if field in data and data[field] is None:
                    raise ValueError(f"{field.capitalize()} cannot be null")
        return data

    def to_patch(self) -> dict:
        patch = self.model_dump(exclude_unset=True)
        if "date" in patch:
            patch["date"] = patch["date"].isoformat()
        return patch


class TransactionFilters(BaseModel):
    """Query parameters accepted by the list endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    type: Optional[TransactionType] = None
    category: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    limit: Optional[int] = None
    offset: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def blank_is_absent(cls, data):
        if isinstance(data, dict):
            return {
                key: None if isinstance(value, str) and not value.strip() else value
                for key, value in data.items()
            }
        return data

    @field_validator("category")
    @classmethod
    def strip_category(cls, value):
        # stored categories are trimmed on write
        return value.strip() if value is not None else value

    @field_validator("limit")
    @classmethod
    def positive_limit(cls, value):
        if value is not None and value <= 0:
            raise ValueError("Limit must be a positive number")
        return value

    @field_validator("offset")
    @classmethod
    def non_negative_offset(cls, value):
        if value is not None and value < 0:
            raise ValueError("Offset must be a non-negative number")
        return value


class TransactionInDB(BaseModel):
    id: str
    user_id: str
    type: Literal["income", "expense"]
    category: str
    amount: float
    note: Optional[str] = None
    date: str
    created_at: str

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Largest lookback per unit; keeps the window start well after year 1
MAX_UNITS = {"days": 365_000, "weeks": 52_000, "months": 12_000, "years": 1_000}


class WindowSpec(BaseModel):
    """
    Window specification accepted by the analysis endpoints.

    Any combination of fields may be supplied; the resolver decides which one
    wins (see app.utils.time_window.resolve_window).
    """

    model_config = ConfigDict(populate_by_name=True)

    days: Optional[int] = None
    weeks: Optional[int] = None
    months: Optional[int] = None
    years: Optional[int] = None
    period: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")

    @model_validator(mode="before")
    @classmethod
    def blank_is_absent(cls, data):
        # ?days=&period= arrive as empty strings
        if isinstance(data, dict):
            return {
                key: None if isinstance(value, str) and not value.strip() else value
                for key, value in data.items()
            }
        return data

    @field_validator("days", "weeks", "months", "years")
    @classmethod
    def positive_units(cls, value, info):
        if value is None:
            return value
        name = info.field_name.capitalize()
        if value <= 0:
            raise ValueError(f"{name} must be a positive integer")
        if value > MAX_UNITS[info.field_name]:
            raise ValueError(f"{name} must be at most {MAX_UNITS[info.field_name]}")
        return value

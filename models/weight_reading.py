import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class WeightReading(BaseModel):
    """Represents a single cylinder weight reading reported by a device."""

    timestamp: datetime = Field(description="The UTC time the reading was taken.")
    weight: float = Field(
        allow_inf_nan=False, description="The measured gross weight in kilograms."
    )

    @field_validator("weight", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("weight must be numeric, not a boolean")
        return value

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def parse_reading(raw: dict) -> Optional[WeightReading]:
    """
    Validates a raw reading document. Returns None when the timestamp is missing
    or the weight is missing, non-numeric or non-finite.
    """
    try:
        return WeightReading.model_validate(raw)
    except ValidationError as e:
        logging.debug(f"Rejected reading {raw!r}: {e.error_count()} error(s).")
        return None

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class ForecastError(str, enum.Enum):
    """Stable, user-displayable reasons why no forecast could be produced."""

    TARE_NOT_SET = "tare weight not set"
    CYLINDER_EMPTY = "cylinder empty or below tare weight"
    NOT_ENOUGH_DATA = "not enough data to predict"
    NOT_ENOUGH_DATA_SINCE_REFILL = "not enough data since last refill"
    INVALID_REGRESSION = "invalid regression data (NaN/zero slope)"
    RATE_TOO_LOW = "consumption rate too low or invalid"
    TIME_CALCULATION_FAILED = "time calculation failed (NaN)"
    PREDICTED_EMPTY = "prediction shows cylinder already empty"
    INVALID_OUTPUT = "invalid output (NaN detected)"


class DepletionForecast(BaseModel):
    """
    The outcome of a single depletion prediction. Either days_left is set and
    error_reason is None, or error_reason explains why no forecast was made.
    The two "already empty" reasons also report days_left = 0.
    """

    generated_at: datetime = Field(alias="generatedAt")
    days_left: Optional[int] = Field(default=None, ge=0, alias="daysLeft")
    avg_consumption_per_day: Optional[float] = Field(
        default=None, alias="avgConsumptionPerDay"
    )
    error_reason: Optional[ForecastError] = Field(default=None, alias="errorReason")
    remaining_gas_kg: Optional[float] = Field(default=None, alias="remainingGasKg")
    samples_used: int = Field(default=0, alias="samplesUsed")
    last_refill_at: Optional[datetime] = Field(default=None, alias="lastRefillAt")

    @field_serializer("error_reason")
    def serialize_error_reason(self, reason: Optional[ForecastError], _info):
        """Converts the ForecastError enum to its string value for serialization."""
        return reason.value if reason is not None else None

    @property
    def is_successful(self) -> bool:
        return self.error_reason is None and self.days_left is not None

    def to_response(self) -> dict:
        """Shapes the forecast as returned to the mobile client."""
        if self.is_successful:
            return {
                "daysLeft": self.days_left,
                "avgConsumptionPerDay": f"{self.avg_consumption_per_day:.2f}",
            }
        return {"daysLeft": self.days_left, "error": self.error_reason.value}

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

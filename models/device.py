import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _coerce_kg(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class DeviceInDB(BaseModel):
    """Represents a monitoring device document as stored in Firestore."""

    id: str
    name: Optional[str] = None
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    weight: Optional[float] = Field(
        default=None, description="Latest gross weight reported by the scale, in kg."
    )
    tare_weight: Optional[float] = Field(
        default=None,
        alias="tareWeight",
        description="Calibrated weight of the empty cylinder and hardware, in kg.",
    )
    gas_level: Optional[float] = Field(default=None, alias="gasLevel")

    @field_validator("weight", "gas_level", mode="before")
    @classmethod
    def coerce_numeric(cls, value: Any) -> Optional[float]:
        """Unreadable numeric fields are treated as unset rather than rejected."""
        return _coerce_kg(value)

    @field_validator("tare_weight", mode="before")
    @classmethod
    def coerce_tare(cls, value: Any) -> Optional[float]:
        """A tare of 0 is the app's "not calibrated yet" value."""
        tare = _coerce_kg(value)
        return tare if tare else None

    @property
    def current_weight_kg(self) -> float:
        return self.weight if self.weight is not None else 0.0

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

import math
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

import config
from models.depletion_forecast import DepletionForecast, ForecastError
from models.weight_reading import WeightReading
from utils.regression import fit_least_squares


def _is_usable(reading: WeightReading) -> bool:
    # A weight of exactly 0 is a real reading and must be kept.
    return (
        reading.timestamp is not None
        and reading.weight is not None
        and math.isfinite(reading.weight)
    )


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are UTC, matching how readings are parsed.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _epoch_ms(moment: datetime) -> float:
    return _as_utc(moment).timestamp() * 1000.0


class DepletionPredictor:
    """
    Forecasts when an LPG cylinder will reach its tare weight by fitting a linear
    trend to the weight readings recorded since the most recent refill.
    """

    def __init__(
        self,
        refill_threshold_kg: float = config.REFILL_THRESHOLD_KG,
        min_consumption_rate_kg_per_day: float = config.MIN_CONSUMPTION_RATE_KG_PER_DAY,
    ):
        self.refill_threshold_kg = refill_threshold_kg
        self.min_consumption_rate_kg_per_day = min_consumption_rate_kg_per_day

    def find_refill_index(self, readings: Sequence[WeightReading]) -> int:
        """Index of the last reading that jumped up by more than the refill threshold, else 0."""
        refill_index = 0
        for i in range(1, len(readings)):
            if readings[i].weight - readings[i - 1].weight > self.refill_threshold_kg:
                refill_index = i
        return refill_index

    def predict(
        self,
        readings: Sequence[WeightReading],
        tare_weight: Optional[float],
        current_weight: float,
        now: datetime,
    ) -> DepletionForecast:
        now = _as_utc(now)
        if tare_weight is None:
            return self._failure(now, ForecastError.TARE_NOT_SET)

        remaining_gas_kg = max(0.0, current_weight - tare_weight)
        if current_weight - tare_weight <= 0:
            return self._failure(
                now, ForecastError.CYLINDER_EMPTY, days_left=0, remaining_gas_kg=0.0
            )

        valid = [r for r in readings if _is_usable(r)]
        if len(valid) < 2:
            return self._failure(
                now, ForecastError.NOT_ENOUGH_DATA, remaining_gas_kg=remaining_gas_kg
            )

        refill_index = self.find_refill_index(valid)
        segment = valid[refill_index:]
        last_refill_at = segment[0].timestamp if refill_index > 0 else None
        if len(segment) < 2:
            return self._failure(
                now,
                ForecastError.NOT_ENOUGH_DATA_SINCE_REFILL,
                remaining_gas_kg=remaining_gas_kg,
                last_refill_at=last_refill_at,
            )

        # Time is measured in days from the first reading of the segment, which keeps
        # the slope directly in kg/day and avoids losing precision on epoch values.
        origin_ms = _epoch_ms(segment[0].timestamp)
        days = [(_epoch_ms(r.timestamp) - origin_ms) / config.MS_PER_DAY for r in segment]
        weights = [r.weight for r in segment]
        context = dict(
            remaining_gas_kg=remaining_gas_kg,
            samples_used=len(segment),
            last_refill_at=last_refill_at,
        )

        slope, intercept = fit_least_squares(days, weights)
        if not (np.isfinite(slope) and np.isfinite(intercept)) or slope == 0:
            return self._failure(now, ForecastError.INVALID_REGRESSION, **context)

        consumption_rate = -slope
        if (
            not np.isfinite(consumption_rate)
            or consumption_rate <= self.min_consumption_rate_kg_per_day
        ):
            return self._failure(now, ForecastError.RATE_TOO_LOW, **context)
        avg_consumption = round(consumption_rate, 2)

        with np.errstate(over="ignore", invalid="ignore"):
            empty_at_day = np.float64(tare_weight - intercept) / slope
        if not np.isfinite(empty_at_day):
            return self._failure(
                now,
                ForecastError.TIME_CALCULATION_FAILED,
                avg_consumption_per_day=avg_consumption,
                **context,
            )

        now_day = (_epoch_ms(now) - origin_ms) / config.MS_PER_DAY
        if empty_at_day < now_day:
            return self._failure(
                now,
                ForecastError.PREDICTED_EMPTY,
                days_left=0,
                avg_consumption_per_day=avg_consumption,
                **context,
            )

        days_until_empty = empty_at_day - now_day
        if not np.isfinite(days_until_empty):
            return self._failure(now, ForecastError.INVALID_OUTPUT, **context)

        return DepletionForecast(
            generated_at=now,
            days_left=math.floor(days_until_empty),
            avg_consumption_per_day=avg_consumption,
            **context,
        )

    @staticmethod
    def _failure(
        now: datetime, reason: ForecastError, days_left: Optional[int] = None, **fields
    ) -> DepletionForecast:
        return DepletionForecast(
            generated_at=now, days_left=days_left, error_reason=reason, **fields
        )

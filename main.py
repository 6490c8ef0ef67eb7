# main.py
import logging
import asyncio
from datetime import datetime, timezone
from typing import Optional

from services.firestore import FirestoreService
from services.depletion_predictor import DepletionPredictor
from models.device import DeviceInDB
from models.depletion_forecast import DepletionForecast

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)


async def forecast_device(
    fs: FirestoreService,
    device: DeviceInDB,
    now: datetime,
    predictor: Optional[DepletionPredictor] = None,
) -> DepletionForecast:
    predictor = predictor or DepletionPredictor()
    readings = await fs.get_recent_readings(device.id)
    forecast = predictor.predict(
        readings,
        tare_weight=device.tare_weight,
        current_weight=device.current_weight_kg,
        now=now,
    )
    if forecast.is_successful:
        logging.info(
            f"Device {device.id}: {forecast.days_left} day(s) left at "
            f"{forecast.avg_consumption_per_day:.2f} kg/day "
            f"({forecast.samples_used} readings)."
        )
    else:
        logging.info(
            f"Device {device.id}: no forecast ({forecast.error_reason.value})."
        )
    return forecast


async def predict_days_left(
    fs: FirestoreService, device_id: str, now: Optional[datetime] = None
) -> dict:
    """Handles a days-left request for one device and returns the client response."""
    device = await fs.get_device(device_id)
    if device is None:
        raise LookupError(f"Device {device_id} not found.")
    forecast = await forecast_device(fs, device, now or datetime.now(timezone.utc))
    return forecast.to_response()


async def process_device(
    fs: FirestoreService, device: DeviceInDB, now: datetime
) -> DepletionForecast:
    logging.info(f"--- Processing device: {device.id} ({device.name}) ---")
    forecast = await forecast_device(fs, device, now)
    await fs.save_depletion_forecast(device.id, forecast)
    return forecast


async def run_daily_job(
    fs: Optional[FirestoreService] = None, now: Optional[datetime] = None
):
    logging.info("Starting depletion forecast daily job.")
    firestore_service = fs or FirestoreService()
    run_time = now or datetime.now(timezone.utc)
    device_count = 0
    async for device in firestore_service.get_all_devices():
        device_count += 1
        try:
            await process_device(firestore_service, device, run_time)
        except Exception as e:
            logging.error(
                f"An unexpected error occurred while processing device {device.id}: {e}",
                exc_info=True,
            )
    logging.info(f"Processed a total of {device_count} device(s).")
    logging.info("Depletion forecast daily job finished.")


if __name__ == "__main__":
    asyncio.run(run_daily_job())

# services/firestore.py
import logging
import os
from typing import AsyncGenerator, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud.firestore_v1.async_client import AsyncClient

import config
from models.depletion_forecast import DepletionForecast
from models.device import DeviceInDB
from models.weight_reading import WeightReading, parse_reading


def initialize_firebase_app():
    if not firebase_admin._apps:
        cred_path = config.SERVICE_ACCOUNT_PATH
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Service account key not found at {cred_path}.")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)
        logging.info("Firebase Admin SDK initialized successfully.")


class FirestoreService:
    def __init__(self):
        initialize_firebase_app()
        self.db: AsyncClient = firestore_async.client()

    def _device_ref(self, device_id: str):
        return self.db.collection(config.DEVICES_COLLECTION).document(device_id)

    async def get_all_devices(
        self, page_size: int = 1000
    ) -> AsyncGenerator[DeviceInDB, None]:
        devices_ref = self.db.collection(config.DEVICES_COLLECTION)
        cursor = None
        while True:
            query = devices_ref.order_by("__name__").limit(page_size)
            if cursor:
                query = query.start_after(cursor)
            docs = await query.get()
            if not docs:
                break
            for doc in docs:
                yield DeviceInDB(id=doc.id, **doc.to_dict())
            cursor = docs[-1]

    async def get_device(self, device_id: str) -> Optional[DeviceInDB]:
        doc = await self._device_ref(device_id).get()
        if not doc.exists:
            return None
        return DeviceInDB(id=doc.id, **doc.to_dict())

    async def get_recent_readings(
        self, device_id: str, limit: int = config.READING_WINDOW_SIZE
    ) -> List[WeightReading]:
        """
        Returns the most recent readings for a device in ascending timestamp order.
        Documents that fail validation are dropped.
        """
        readings_ref = self._device_ref(device_id).collection(
            config.READINGS_COLLECTION
        )
        query = readings_ref.order_by("timestamp", direction="DESCENDING").limit(limit)
        docs = await query.get()
        readings = []
        rejected = 0
        for doc in docs:
            reading = parse_reading(doc.to_dict())
            if reading is None:
                rejected += 1
                continue
            readings.append(reading)
        if rejected:
            logging.warning(
                f"Skipped {rejected} invalid reading(s) for device {device_id}."
            )
        readings.reverse()
        return readings

    async def save_depletion_forecast(
        self, device_id: str, forecast: DepletionForecast
    ):
        """
        Saves the forecast for the day it was generated, overwriting any earlier
        forecast from the same day.
        """
        doc_id = forecast.generated_at.date().isoformat()
        doc_ref = (
            self._device_ref(device_id)
            .collection(config.FORECASTS_COLLECTION)
            .document(doc_id)
        )
        await doc_ref.set(forecast.model_dump(by_alias=True))
        logging.info(f"Saved depletion forecast {doc_id} for device {device_id}.")

# lpg_forecast_service/config.py
import os

# --- Depletion Forecast Tuning Parameters ---

# Minimum weight increase between two consecutive readings that counts as a refill.
# A value of 5.0 means a jump of more than 5 kg is treated as a full cylinder being swapped in.
REFILL_THRESHOLD_KG = 5.0

# Consumption rates at or below this are treated as sensor noise, not real usage.
# Near-zero slopes would otherwise produce absurdly large day counts.
MIN_CONSUMPTION_RATE_KG_PER_DAY = 0.01

# --- Telemetry Window ---

# Number of most recent readings fetched per device.
READING_WINDOW_SIZE = 100

# --- Constants ---
MS_PER_DAY = 24 * 60 * 60 * 1000

# --- Firestore Layout ---
DEVICES_COLLECTION = "devices"
READINGS_COLLECTION = "readings"
FORECASTS_COLLECTION = "depletionForecasts"

SERVICE_ACCOUNT_PATH = os.environ.get(
    "GOOGLE_SERVICE_ACCOUNT_PATH",
    os.path.join(os.path.dirname(__file__), "service-account.json"),
)

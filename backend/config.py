import os
from dotenv import load_dotenv

load_dotenv()

# --- Server ---
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "https://city-data-org.vercel.app,http://localhost:5173").split(",")

# --- Air quality (WAQI) ---
# TOKEN is the variable name older deployments used
WAQI_TOKEN = os.getenv("WAQI_TOKEN", os.getenv("TOKEN", ""))

# --- Upstream services ---
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
COUNTRY_CODES = os.getenv("COUNTRY_CODES", "in")
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
WAQI_FEED_URL = "https://api.waqi.info/feed"
WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary"

OVERPASS_ENDPOINTS = os.getenv(
    "OVERPASS_ENDPOINTS",
    "https://overpass-api.de/api/interpreter,"
    "https://overpass.kumi.systems/api/interpreter,"
    "https://overpass.nchc.org.tw/api/interpreter",
).split(",")

USER_AGENT = os.getenv("USER_AGENT", "CityData.org/1.0")
HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "30"))
# Worst case is every Overpass mirror timing out twice, so keep this generous
REQUEST_DEADLINE_S = float(os.getenv("REQUEST_DEADLINE_S", "120"))

# --- Spatial ---
SEARCH_RADIUS_M = int(os.getenv("SEARCH_RADIUS_M", "12000"))

# --- Local dataset ---
DATASET_PATH = os.getenv("DATASET_PATH", "data/final_cities.csv")

# --- Rate limiting (per client IP) ---
RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "50"))
RATE_LIMIT_WINDOW_S = int(os.getenv("RATE_LIMIT_WINDOW_S", str(15 * 60)))
RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

# --- Report sections ---
SECTIONS = ["stats", "weather", "airQuality", "infrastructure", "waterBodies", "wikipedia"]

# Sections whose failure is replaced by a placeholder instead of failing the request.
DEGRADABLE_SECTIONS = {
    s.strip() for s in os.getenv("DEGRADABLE_SECTIONS", "airQuality").split(",") if s.strip()
}

# "exact" keeps raw OSM names as-is; "normalized" merges case/whitespace variants
NAME_DEDUP = os.getenv("NAME_DEDUP", "exact")

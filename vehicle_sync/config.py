# vehicle_sync/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# CMS connection
CMS_URL = os.getenv("CMS_URL", "http://localhost:3000")
PAYLOAD_SECRET = os.getenv("PAYLOAD_SECRET")
VEHICLE_COLLECTION = "fordon"
BRAND_COLLECTION = "bilmarken"

# Runtime parameters
EXISTING_FETCH_LIMIT = 1000
CMS_RATE_LIMIT = int(os.getenv("CMS_RATE_LIMIT", "10"))  # requests per second
CMS_TIMEOUT = 60
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Match thresholds
STRUCTURED_ACCEPT_THRESHOLD = 0.7
STRUCTURED_CANDIDATE_THRESHOLD = 0.8
EXACT_MATCH_SCORE = 1.0
FUZZY_TITLE_THRESHOLD = 0.9
CAMPAIGN_THRESHOLD = 0.8
MODEL_NAME_THRESHOLD = 0.8
MODEL_PRICE_TOLERANCE = 0.25

# Structured scorer weights (sum to 1.0)
TITLE_WEIGHT = 0.4
BRAND_WEIGHT = 0.25
MODEL_WEIGHT = 0.25
BODY_TYPE_WEIGHT = 0.1

# File names
INPUT_JSON = "scraped_vehicles.json"
INPUT_CSV = "scraped_vehicles.csv"
OUTPUT_CSV = "import_results.csv"

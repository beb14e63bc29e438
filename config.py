# bucketlist_advisor/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# BACKEND
# ============================================================
API_BASE_URL = os.getenv("BUCKETLIST_API_URL", "http://localhost:8080/api")
REQUEST_TIMEOUT = float(os.getenv("BUCKETLIST_TIMEOUT", "15"))

# Only idempotent reads are retried. Feedback is never re-sent.
READ_RETRIES = int(os.getenv("BUCKETLIST_READ_RETRIES", "3"))
RETRY_DELAY = 1.0

# Deployments without a category axis draw from a mode-only queue
USE_CATEGORIES = _env_bool("BUCKETLIST_USE_CATEGORIES", True)


# ============================================================
# QUEUE
# ============================================================
REFILL_BATCH_SIZE = 5
REFILL_BATCH_MIN = 1
REFILL_BATCH_MAX = 10


# ============================================================
# PROFILE
# ============================================================
AGE_MIN = 18
AGE_MAX = 100

GENDERS = ["MALE", "FEMALE", "UNSPECIFIED"]

DEFAULT_CURRENCY = "SEK"


# ============================================================
# CATEGORIES & MODES
# ============================================================
CATEGORIES = {
    "TRAVEL_VACATION": {
        "display_name": "Travel & Vacation",
        "description": "Travel destinations, vacation experiences, hotels, and tourism",
    },
    "LUXURY_THINGS": {
        "display_name": "Luxury Things",
        "description": "High-end products, luxury goods, premium services, and exclusive experiences",
    },
    "HEALTH_WELLNESS": {
        "display_name": "Health & Wellness",
        "description": "Physical health, mental wellbeing, fitness, nutrition, and self-care",
    },
    "SOCIAL_LIFESTYLE": {
        "display_name": "Social & Lifestyle",
        "description": "Social activities, entertainment, lifestyle enhancements, and experiences with others",
    },
    "MENTAL_EMOTIONAL": {
        "display_name": "Mental & Emotional Wellbeing",
        "description": "Mental health, personal development, therapy, coaching, and emotional wellbeing",
    },
    "SMALL_LUXURY": {
        "display_name": "Small Luxury Treats",
        "description": "Affordable luxury treats, small indulgences, and everyday pleasures",
    },
    "FREEDOM_COMFORT": {
        "display_name": "Freedom & Comfort",
        "description": "Experiences and purchases that provide freedom, comfort, and convenience",
    },
    "OPTIONAL_ADDONS": {
        "display_name": "Optional Add-ons",
        "description": "Supplementary experiences, add-on services, upgrades, and extra features",
    },
}

MODES = {
    "PROVEN": {
        "display_name": "Proven Ideas",
        "description": "Popular, well-known bucket list items that most people would enjoy",
    },
    "CREATIVE": {
        "display_name": "Creative Ideas",
        "description": "Unique, uncommon experiences that people generally wouldn't think of",
    },
}

DEFAULT_MODE = "PROVEN"

# Offered when a suggestion arrives without its own reason menu
DEFAULT_REJECTION_REASONS = [
    "Too expensive",
    "Not interested in this kind of experience",
    "Already done it",
    "Not realistic for me right now",
]

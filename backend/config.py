import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from root directory (parent of backend/)
root_env = Path(__file__).parent.parent / ".env"
load_dotenv(root_env)
load_dotenv()  # Also try local .env as fallback

# Printify connection
PRINTIFY_API_TOKEN = os.getenv("PRINTIFY_API_TOKEN", "")
PRINTIFY_BASE_URL = os.getenv("PRINTIFY_BASE_URL", "https://api.printify.com/v1").rstrip("/")
PRINTIFY_UPLOAD_TIMEOUT = float(os.getenv("PRINTIFY_UPLOAD_TIMEOUT", "180"))

# HTTP surface
PORT = int(os.getenv("PORT", "3001"))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(50 * 1024 * 1024)))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Catalog entry every upload targets
CANVAS_BLUEPRINT_TITLE = 'Matte Canvas, Stretched, 1.25"'

# Provider accepted for the canvas blueprint (matched by title, or by its legacy id)
CANVAS_PROVIDER_NAME = "jondo"
CANVAS_PROVIDER_FALLBACK_ID = "1"

# Providers shown in the global provider list and the product listing
LISTING_PROVIDERS = {
    105: "Jondo",
    2: "Sensaria",
}

# Image thresholds (pixels)
TARGET_IMAGE_SIZE = 6000
MIN_IMAGE_SIZE = 1000
JPEG_QUALITY = 95
# Decoder pixel cap; Pillow refuses images over twice this size
MAX_IMAGE_PIXELS = int(os.getenv("MAX_IMAGE_PIXELS", str(20000 * 20000)))

# Printify caps product listing pages at 50
PRODUCTS_PAGE_LIMIT = 50

DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_SHIPPING_METHOD = "standard"

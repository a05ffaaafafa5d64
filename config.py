# config.py - environment settings for the re-print intake service
import datetime
import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Blob storage
STORAGE_CONNECTION_STRING = os.getenv("ReprintStorageConnectionString")
CONTAINER_NAME = os.getenv("ReprintContainerName", "re-print-ids")

# Watermark
WATERMARK_FONT_PATH = os.getenv("WATERMARK_FONT_PATH")
WATERMARK_SITE = os.getenv("WATERMARK_SITE", "ศูนย์การค้าอิมพีเรียลเวิลด์ สำโรง")

# Uploads above ~3MB tend to hit the hosting request limit once base64'd
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(4 * 1024 * 1024)))

HEALTH_PROBE_MINUTES = int(os.getenv("HEALTH_PROBE_MINUTES", "15"))

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOCATIONS_PATH = os.getenv("LOCATIONS_PATH", os.path.join(BASE_DIR, "data", "th_locations.json"))
STATIC_DIR = os.path.join(BASE_DIR, "static")

# Thailand has no DST
LOCAL_TZ = datetime.timezone(datetime.timedelta(hours=7), "Asia/Bangkok")

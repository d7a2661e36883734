# app/config.py
"""Environment-driven settings.

Values are read once at import time; `.env` files are honoured through
python-dotenv.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name, default):
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or "sqlite:///./fixify.db"
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", 10)

JWT_SECRET = os.getenv("JWT_SECRET") or "dev-secret-change-me"
JWT_TTL_SECONDS = _env_int("JWT_TTL_SECONDS", 60 * 60 * 24 * 7)

CORS_ORIGINS = [o.strip() for o in (os.getenv("CORS_ORIGIN") or "http://localhost:5173").split(",") if o.strip()]

UPLOAD_DIR = os.getenv("UPLOAD_DIR") or os.path.join(os.getcwd(), "uploads")
MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
CLOUDINARY_URL = os.getenv("CLOUDINARY_URL")
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "fixify-plus")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

DEFAULT_COUNTRY_CODE = os.getenv("DEFAULT_COUNTRY_CODE", "91")
ENDORSEMENT_THRESHOLD = _env_int("ENDORSEMENT_THRESHOLD", 3)

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./grievances.db")

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "120"))

# "local" or "gridfs"
ATTACHMENT_BACKEND = os.getenv("ATTACHMENT_BACKEND", "local").lower()
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
GRIDFS_DATABASE = os.getenv("GRIDFS_DATABASE", "grievance_cell")
GRIDFS_BUCKET = os.getenv("GRIDFS_BUCKET", "attachments")

SEED_DEPARTMENTS = os.getenv("SEED_DEPARTMENTS", "true").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

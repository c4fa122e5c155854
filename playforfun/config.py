import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/playforfun.db")

# Security
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "playforfun_session")
SESSION_EXPIRE_DAYS = int(os.getenv("SESSION_EXPIRE_DAYS", "7"))
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

# Spaces
JOIN_CODE_LENGTH = int(os.getenv("JOIN_CODE_LENGTH", "6"))
JOIN_CODE_MAX_ATTEMPTS = int(os.getenv("JOIN_CODE_MAX_ATTEMPTS", "10"))
MIN_PASSWORD_LENGTH = 6

# Frontend origin allowed by CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

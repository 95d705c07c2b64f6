"""
Application settings.
Loads environment variables, configures logging and defines directory paths.
"""
import logging
import os
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Load .env
load_dotenv()

# =========================
# Logging
# =========================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# =========================
# Settings from environment
# =========================

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./meetings.db")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "")
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "168"))  # 1 week
PBKDF2_ITERATIONS = int(os.getenv("PBKDF2_ITERATIONS", "200000"))

# Mail (SMTP over SSL)
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
MAIL_FROM = os.getenv("MAIL_FROM", "") or SMTP_USER
MAIL_ENABLED = bool(SMTP_USER and SMTP_PASS)

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
EXPOSE_ERROR_DETAILS = os.getenv("EXPOSE_ERROR_DETAILS", "false").lower() == "true"

# Pagination
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Client
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")
API_TOKEN = os.getenv("API_TOKEN", "")

# =========================
# Validation
# =========================
if not SECRET_KEY:
    logger.warning("[Config] SECRET_KEY is not set; issued tokens will not survive a restart.")
    SECRET_KEY = secrets.token_hex(32)
if not MAIL_ENABLED:
    logger.warning("[Config] SMTP credentials are not set; e-mail delivery is skipped.")

# =========================
# Directory paths
# =========================
BASE_DIR = Path(__file__).parent
DATA_DIR = Path(os.getenv("DATA_DIR") or BASE_DIR / "data")
PDF_DIR = DATA_DIR / "pdf"

PDF_DIR.mkdir(parents=True, exist_ok=True)

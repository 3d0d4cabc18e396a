import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Database ---
DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
DB_PORT = os.getenv("POSTGRES_PORT", "5433")
DB_NAME = os.getenv("POSTGRES_DB", "petshop")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
SQL_ECHO = _flag("SQL_ECHO", "false")

# --- API ---
BASE_PATH = os.getenv("BASE_PATH", "/api/v1")

# --- ZaloPay ---
ZALOPAY_APP_ID = os.getenv("ZALOPAY_APP_ID", "")
ZALOPAY_KEY1 = os.getenv("ZALOPAY_KEY1", "")
ZALOPAY_KEY2 = os.getenv("ZALOPAY_KEY2", "")
ZALOPAY_ENDPOINT = os.getenv("ZALOPAY_ENDPOINT", "https://sb-openapi.zalopay.vn/v2/create")
NGROK_URL = os.getenv("NGROK_URL", "http://localhost:8000")

# --- Google Text-to-Speech ---
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GOOGLE_TTS_ENDPOINT = os.getenv(
    "GOOGLE_TTS_ENDPOINT", "https://texttospeech.googleapis.com/v1/text:synthesize"
)

# --- Observability ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")
TRACING_ENABLED = _flag("TRACING_ENABLED")

# --- Rate limiting ---
RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED")
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "10/minute")
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "20/minute")

# --- Auth ---
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

import os

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./invoicer.db")
ENV = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
ENV_NORMALIZED = ENV.strip().lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED in {"test", "testing"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

# Session tokens (JWT)
DEV_JWT_SECRET_KEY = "change-me"
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "").strip() or (DEV_JWT_SECRET_KEY if (IS_DEV or IS_TEST) else "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24)))

# Second factor
ENABLE_2FA = os.getenv("ENABLE_2FA", "").strip().lower() in _TRUE_VALUES
TOTP_VALID_WINDOW = int(os.getenv("TOTP_VALID_WINDOW", "1"))
CHALLENGE_EXPIRE_MINUTES = int(os.getenv("CHALLENGE_EXPIRE_MINUTES", "5"))

# Notification gateway (SMS)
SMS_PROVIDER = os.getenv("SMS_PROVIDER", "mock").strip().lower()
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "").strip()
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "").strip()
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "").strip()
TWILIO_API_BASE_URL = os.getenv("TWILIO_API_BASE_URL", "https://api.twilio.com/2010-04-01").rstrip("/")
SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "10"))

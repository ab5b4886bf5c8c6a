import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./events.db")

# Redis configuration (an empty URL disables the registration lock)
REDIS_URL = os.getenv("REDIS_URL", "")
REGISTRATION_LOCK_TIMEOUT = int(os.getenv("REGISTRATION_LOCK_TIMEOUT", "10"))
REGISTRATION_LOCK_WAIT = int(os.getenv("REGISTRATION_LOCK_WAIT", "5"))

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL


def get_cors_origins() -> list[str]:
    return [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

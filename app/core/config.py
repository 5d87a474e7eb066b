# app/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"

# Overrides the DEBUG/INFO default picked from APP_ENV
LOG_LEVEL = os.getenv("LOG_LEVEL", "").upper() or None

APP_NAME = os.getenv("APP_NAME", "Freight Forwarding CRM API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

# Scheduler runs by default outside production; production must opt in
ENABLE_SCHEDULER = os.getenv(
    "ENABLE_SCHEDULER",
    "false" if IS_PRODUCTION else "true",
).lower() == "true"

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    SQLITE_PATH = os.getenv("SQLITE_PATH", "./crm.db")
    DATABASE_URL = f"sqlite+aiosqlite:///{SQLITE_PATH}"

# ---- Pool tuning (safe defaults) ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# ---- SSL ----
# MUST be true in production
DB_SSL_VERIFY = os.getenv("DB_SSL_VERIFY", "true").lower() == "true"

# =====================================================
# JWT / AUTH
# =====================================================
JWT_ACCESS_SECRET_KEY = os.getenv("JWT_ACCESS_SECRET_KEY")
if not JWT_ACCESS_SECRET_KEY:
    raise ValueError("JWT_ACCESS_SECRET_KEY must be set")

JWT_ALGORITHM = "HS256"

ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
)
ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES", 60)
)
REFRESH_TOKEN_EXPIRE_DAYS = int(
    os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7)
)

# Password applied by the admin "reset password" action
DEFAULT_RESET_PASSWORD = os.getenv("DEFAULT_RESET_PASSWORD", "test123")

# Issuer claim written to and required from every access token
JWT_ISSUER = os.getenv("JWT_ISSUER", "freight-crm")

# Requests slower than this are logged at WARNING by the access log
SLOW_REQUEST_MS = int(os.getenv("SLOW_REQUEST_MS", 1500))

# =====================================================
# BOOTSTRAP ADMIN
# =====================================================
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@freight.mn")
ADMIN_NAME = os.getenv("ADMIN_NAME", "System Administrator")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

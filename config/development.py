import os

from .config import db_config_from_env, env_bool, env_int

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env(default_password="timeharbor")

DEBUG = True
TESTING = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, pending migrations are applied on startup
AUTO_MIGRATE = env_bool("AUTO_MIGRATE", "1")

ACCESS_TOKEN_MINUTES = env_int("ACCESS_TOKEN_MINUTES", 24 * 60)
REFRESH_TOKEN_DAYS = env_int("REFRESH_TOKEN_DAYS", 7)
RESET_TOKEN_MINUTES = env_int("RESET_TOKEN_MINUTES", 60)

# Push is disabled unless both are set
FCM_PROJECT_ID = os.getenv("FCM_PROJECT_ID", "")
FCM_ACCESS_TOKEN = os.getenv("FCM_ACCESS_TOKEN", "")

PROXY_FRONTEND_URL = os.getenv("PROXY_FRONTEND_URL", "http://localhost:3000")
PROXY_BACKEND_URL = os.getenv("PROXY_BACKEND_URL", "http://localhost:3001")
PROXY_PORT = env_int("PORT", 8080)
API_PORT = env_int("API_PORT", 3001)

import os

from .config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="timeharbor_test")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_MIGRATE = False

ACCESS_TOKEN_MINUTES = 60
REFRESH_TOKEN_DAYS = 7
RESET_TOKEN_MINUTES = 60

FCM_PROJECT_ID = ""
FCM_ACCESS_TOKEN = ""

PROXY_FRONTEND_URL = os.getenv("PROXY_FRONTEND_URL", "http://localhost:3000")
PROXY_BACKEND_URL = os.getenv("PROXY_BACKEND_URL", "http://localhost:3001")
PROXY_PORT = 8080
API_PORT = 3001

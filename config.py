import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()

class Config:
    # --- MongoDB Settings ---
    MONGO_URI = os.getenv("MONGO_URI")
    DB_NAME = os.getenv("DB_NAME", "equipcpd") # Can be overridden in .env

    # --- Environment ---
    ENV = os.getenv("ENV", "development") # "development" or "production"
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # --- Security Settings ---
    # JWT secret shared with the auth provider. ALWAYS set this in production.
    SECRET_KEY = os.getenv("SECRET_KEY")
    if ENV == "production" and not SECRET_KEY:
        raise ValueError("SECRET_KEY environment variable is mandatory in production!")
    elif not SECRET_KEY:
        SECRET_KEY = "dev_secret_key_change_in_prod"
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 # 1 Day

    # Privileged key used by schedulers / server-side callers of the send endpoints
    SERVICE_ROLE_KEY = os.getenv("SERVICE_ROLE_KEY")

    # --- Web Push (VAPID) ---
    VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY")
    VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY")
    VAPID_CLAIM_EMAIL = os.getenv("VAPID_CLAIM_EMAIL", "admin@equipecho.com")
    PUSH_TTL = int(os.getenv("PUSH_TTL", "86400")) # 24 hours
    PUSH_TIMEOUT = float(os.getenv("PUSH_TIMEOUT", "10"))

config = Config()

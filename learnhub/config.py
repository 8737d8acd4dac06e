"""
LearnHub Configuration
Storage, token and one-time code settings
"""

import os

# Storage (in-memory when MONGO_URL is unset)
MONGO_URL = os.getenv("MONGO_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "learnhub_db")
SEED_SAMPLE_COURSES = os.getenv("SEED_SAMPLE_COURSES", "true").lower() == "true"

# Access tokens
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

# One-time login codes
OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10"))
OTP_LENGTH = 6
# Demo mode: echo the code back when it could not be mailed
EXPOSE_DEV_CODE = os.getenv("EXPOSE_DEV_CODE", "true").lower() == "true"

# Login code delivery (disabled unless EMAIL_USER and EMAIL_PASS are set)
EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USE_TLS = os.getenv("EMAIL_USE_TLS", "true").lower() == "true"
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASS = os.getenv("EMAIL_PASS")
EMAIL_FROM = os.getenv("EMAIL_FROM") or EMAIL_USER
EMAIL_TIMEOUT_SECONDS = int(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

# Live quiz sessions untouched for this long are dropped
QUIZ_SESSION_TTL_MINUTES = int(os.getenv("QUIZ_SESSION_TTL_MINUTES", "240"))

# Quiz defaults
DEFAULT_PASS_MARK = 0.8

# Server
VERSION = os.getenv("VERSION", "0.1.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "8000"))

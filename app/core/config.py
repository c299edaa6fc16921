import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "access-secret")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "refresh-secret")
    JWT_ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 10))
    REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 1))
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 3000))
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "public/uploads")
    MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 1_000_000))
    DEFAULT_LIST_SIZE = int(os.getenv("DEFAULT_LIST_SIZE", 10))
    MAX_LIST_SIZE = int(os.getenv("MAX_LIST_SIZE", 100))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()

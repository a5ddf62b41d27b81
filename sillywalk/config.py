# sillywalk/config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./sillywalk.db")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api/v1")
    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "https://ministry.silly.gov.uk").split(",") if o.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    STATISTICS_DEFAULT_DAYS: int = int(os.getenv("STATISTICS_DEFAULT_DAYS", "30"))

settings = Settings()

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DB_URL: str = "sqlite+aiosqlite:///./logiscan.db"
    DB_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # minimum gap between two accepted scans on the same list
    SCAN_MIN_INTERVAL_SECONDS: float = 1.0

    STOCK_LOCATION: str = "STOCK"
    EVENT_LOCATION_PREFIX: str = "EVENT_"
    QR_PAYLOAD_VERSION: int = 1

    class Config:
        env_file = ".env"

settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_NAME: str = "Salon"
    BUSINESS_TIMEZONE: str = "Europe/London"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    STORE_DATA_DIR: str = "./data/appointments"
    STORE_LOCK_ATTEMPTS: int = 5

    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8001

    SCHEDULING_API_BASE_URL: str = "http://127.0.0.1:8001"
    SCHEDULING_API_TIMEOUT: float = 10.0


settings = Settings()

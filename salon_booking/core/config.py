from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    BUSINESS_NAME: str = "Your Salon"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    DATA_DIR: str = "./data"

    DEFAULT_SLOT_INTERVAL_MINUTES: int = 30
    ALLOW_SAME_DAY_BOOKING: bool = False
    BOOKING_HORIZON_DAYS: int = 90

    CAL_COM_API_KEY: str | None = None
    CAL_COM_EVENT_TYPE_ID: int | None = None
    CAL_COM_DEFAULT_ATTENDEE_EMAIL: str | None = None
    CAL_COM_BASE_URL: str = "https://api.cal.com/v1"


settings = Settings()

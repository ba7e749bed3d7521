from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Database settings
    database_url: str = "sqlite:///./daily_haven.db"

    log_level: str = "INFO"

    # Display settings, passed explicitly into formatting code
    currency_symbol: str = "$"

    # Period used for budget suggestions when the request leaves it out
    default_budget_period: str = "monthly"

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings():
    return Settings()

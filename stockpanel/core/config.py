# stockpanel/core/config.py
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # tell pydantic-settings to load from .env
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = "Stock Panel API"
    debug: bool = False
    log_level: str = "INFO"

    mongo_uri: str = "mongodb://localhost:27017"
    db_name: str = "stockpanel"

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 1 week

    # USD -> local currency
    exchange_rate_url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    exchange_rate_currency: str = "ARS"
    fallback_exchange_rate: float = 350
    exchange_rate_timeout: float = 8

    card_surcharge: float = 1.15
    price_rounding: int = 100

    list_limit: int = 10
    top_categories: int = 6
    sales_window_days: int = 7

    # "snapshot": stock = cart snapshot - quantity (no concurrency control)
    # "atomic": $inc guarded by stock >= quantity
    stock_write_mode: Literal["snapshot", "atomic"] = "snapshot"

settings = Settings()

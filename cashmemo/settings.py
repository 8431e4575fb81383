import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CASHMEMO_", extra="ignore")

    db_url: str = "sqlite:///cashmemo.db"

    storage_backend: str = "local"
    storage_local_path: str = "./memos"
    storage_prefix: str = "memos"

    log_level: str = "INFO"
    log_json: bool = False

    serial_floor: int = 10000
    serial_retry_attempts: int = 3
    cache_ttl_seconds: int = 30  # 0 disables the invoice listing cache

    shop_name: str = "MASTER COMPUTER & PRINTING PRESS"
    shop_tagline: str = "Computer Compose, Offset Printing, Banner & Digital Print"
    shop_phone: str = "01720-365191"
    shop_address: str = "Primary Association Market, Sakhipur, Tangail"

    currency_unit: str = "Taka"
    minor_unit: str = "Paisa"
    currency_symbol: str = "Tk"


settings = Settings()

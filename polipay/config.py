"""Application configuration via environment variables."""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings

from polipay.gateway.client import BASE_URL, Credentials


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./polipay.db"
    log_level: str = "INFO"

    poli_login: str = ""
    poli_password: SecretStr = SecretStr("")
    poli_base_url: str = BASE_URL
    poli_timeout_seconds: float = 30.0

    merchant_homepage_url: str = "http://localhost:8000"
    notification_url: str = "http://localhost:8000/api/transactions/notify"
    return_url: str = "http://localhost:8000/api/transactions/return"
    transaction_timeout: Optional[int] = None  # seconds; POLi default when unset

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def credentials(self) -> Credentials:
        return Credentials(login=self.poli_login, password=self.poli_password.get_secret_value())


settings = Settings()

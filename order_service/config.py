from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "orders"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full SQLAlchemy URL, wins over the postgres_* parts when set
    sqlalchemy_database_url: Optional[str] = None

    env: str = "local"
    log_level: str = "INFO"
    correlation_id_header: str = "X-Correlation-Id"

    promotion_job_enabled: bool = True
    promotion_fixed_rate_seconds: float = 300
    promotion_initial_delay_seconds: float = 0
    promotion_lock_at_most_for_seconds: float = 240
    promotion_lock_at_least_for_seconds: float = 30

    @property
    def database_url(self):
        if self.sqlalchemy_database_url:
            return self.sqlalchemy_database_url

        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()

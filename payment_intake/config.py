from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):  # type: ignore
    debug: bool = False

    postgres_user: str = 'postgres'
    postgres_password: str = 'postgres'
    postgres_host: str = 'localhost'
    postgres_port: int = 5432
    postgres_db: str = 'payments'
    database_url: str = ''
    test_database_url: str = 'sqlite+aiosqlite:///:memory:'

    stripe_secret_key: str = ''
    payment_currency: str = 'brl'
    simulated_failure_threshold: float = 0.1

    mailersend_api_key: str = ''
    mailersend_from_email: str = ''
    mailersend_from_name: str = ''
    mailersend_api_url: str = 'https://api.mailersend.com/v1/email'
    mailersend_request_timeout: float = 10.0

    notification_recipient_template: str = (
        'rider-{rider_id}@riders.bikeshare.local'
    )

    payment_queue_drain_interval_seconds: int = 60
    worker_shutdown_timeout_seconds: int = 10

    sentry_dsn: str = ''

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @model_validator(mode='after')
    def build_database_url(self) -> 'Settings':
        if not self.database_url:
            self.database_url = (
                f'postgresql+asyncpg://'
                f'{self.postgres_user}:{self.postgres_password}'
                f'@{self.postgres_host}:{self.postgres_port}'
                f'/{self.postgres_db}'
            )
        return self

    @model_validator(mode='after')
    def check_failure_threshold(self) -> 'Settings':
        if not 0 <= self.simulated_failure_threshold <= 1:
            raise ValueError(
                'SIMULATED_FAILURE_THRESHOLD must be between 0 and 1'
            )
        return self

    @property
    def gateway_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def mailer_enabled(self) -> bool:
        return bool(self.mailersend_api_key and self.mailersend_from_email)


settings = Settings()

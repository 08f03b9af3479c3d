from pathlib import Path
from typing import List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Coach Booking'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')
    TIMEZONE: str = 'Europe/Bucharest'

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ANON_COOKIE_NAME: str = 'public_intent_id'
    ANON_COOKIE_MAX_AGE_DAYS: int = 30

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'coach_booking'

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # SQLAlchemy engine pool (schema creation and ORM reads)
    DB_POOL_SIZE: int = 5
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # asyncpg pool (hot paths)
    ASYNCPG_POOL_MIN_SIZE: int = 5
    ASYNCPG_POOL_MAX_SIZE: int = 20
    ASYNCPG_POOL_COMMAND_TIMEOUT: float = 30.0
    ASYNCPG_POOL_MAX_INACTIVE_LIFETIME: float = 300.0
    ASYNCPG_POOL_TIMEOUT: float = 10.0
    ASYNCPG_POOL_MAX_QUERIES: int = 50000

    # Redis (pub/sub for run rooms)
    REDIS_HOST: str = 'localhost'
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ''
    REDIS_DECODE_RESPONSES: bool = True
    REDIS_POOL_MAX_CONNECTIONS: int = 50
    REDIS_POOL_SOCKET_TIMEOUT: int = 10
    REDIS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10
    REDIS_POOL_SOCKET_KEEPALIVE: bool = True
    REDIS_POOL_HEALTH_CHECK_INTERVAL: int = 30

    # Holds and orders
    INTENT_TTL_SECONDS: int = 90
    ORDER_TTL_SECONDS: int = 600
    SALES_CHANNEL: str = 'online'
    CURRENCY: str = 'RON'

    # Expiry reaper
    ENABLE_REAPER: bool = True
    REAPER_INTERVAL_SECONDS: int = 60
    REAPER_GRACE_SECONDS: int = 120
    REAPER_RECENT_PAYMENT_SECONDS: int = 900
    REAPER_LOCK_NAME: str = 'booking_expiry_reaper'

    # Payment gateway (iPay-style register.do / getOrderStatusExtended.do)
    PAYMENT_PROVIDER: str = 'ipay'
    PAYMENT_BASE_URL: str = 'https://ecclients-sandbox.btrl.ro/payment/rest'
    PAYMENT_USER: str = ''
    PAYMENT_PASSWORD: SecretStr = SecretStr('')
    PAYMENT_RETURN_URL: str = 'http://localhost:8000/api/payment/return'
    PAYMENT_CURRENCY_NUMERIC: int = 946
    PAYMENT_TIMEOUT_SECONDS: float = 15.0
    PAYMENT_FINISH_URL: str = 'http://localhost:3000/checkout/finish'

    # Realtime
    SSE_PING_SECONDS: int = 15


settings = Settings()  # type: ignore

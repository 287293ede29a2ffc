# config/settings.py

from datetime import timedelta, timezone
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, validator
import os
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Fellowship Manager"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production|testing)$")
    FRONTEND_URL: str = "http://localhost:5173"

    # CORS
    CORS_ORIGINS: str = ""

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if not self.CORS_ORIGINS:
            return ["*"] if self.DEBUG else []
        return [s.strip() for s in self.CORS_ORIGINS.split(",") if s.strip()]

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = Field(default=20, ge=5, le=100)
    DB_MAX_OVERFLOW: int = Field(default=30, ge=5, le=100)
    DB_POOL_RECYCLE: int = Field(default=3600, ge=300)

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # Security
    SECRET_KEY: str = Field(min_length=8)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = Field(default=24, ge=1, le=24 * 30)
    MAX_FAILED_LOGINS: int = Field(default=5, ge=1, le=20)
    LOCKOUT_MINUTES: int = Field(default=15, ge=1, le=24 * 60)

    # Organisation policy
    ORG_UTC_OFFSET_HOURS: int = Field(default=3, ge=-12, le=14)  # EAT
    SEMESTERS_PER_YEAR: int = Field(default=2, ge=1, le=4)

    # Email
    EMAIL_FROM: str = "noreply@fellowship.local"
    EMAIL_NAME: str = "Fellowship Manager"
    EMAIL_HOST: str = "localhost"
    EMAIL_PORT: int = Field(default=587, ge=1, le=65535)
    EMAIL_USER: Optional[str] = None
    EMAIL_PASSWORD: Optional[str] = None
    EMAIL_USE_TLS: bool = True
    EMAIL_TIMEOUT: int = Field(default=30, ge=5, le=300)
    EMAIL_QUEUE_ENABLED: bool = True
    EMAIL_QUEUE_INTERVAL_SECONDS: int = Field(default=30, ge=5)
    EMAIL_QUEUE_BATCH_SIZE: int = Field(default=20, ge=1, le=500)
    EMAIL_MAX_ATTEMPTS: int = Field(default=3, ge=1, le=10)

    # Caching
    CACHE_ROSTER_TTL: int = Field(default=120, ge=10)

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    ACADEMIC_RECALC_HOUR: int = Field(default=2, ge=0, le=23)

    # Monitoring
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Server
    PORT: Optional[int] = Field(default=8000, ge=1, le=65535)

    @validator('SECRET_KEY')
    def validate_secrets(cls, v):
        """Ensure secrets are strong enough"""
        if len(v) < 8:
            raise ValueError('Secret keys must be at least 8 characters long')
        if len(v) < 32:
            import warnings
            warnings.warn(f"Secret key is only {len(v)} characters. Consider using at least 32 characters for production.", UserWarning)
        return v

    @validator('DATABASE_URL')
    def validate_database_url(cls, v):
        """Validate database URL format"""
        if not v.startswith(('postgresql://', 'postgresql+psycopg2://', 'sqlite://')):
            raise ValueError('Unsupported database URL format')
        return v

    @validator('REDIS_URL')
    def validate_redis_url(cls, v):
        """Validate Redis URL format"""
        if not v.startswith(('redis://', 'rediss://')):
            raise ValueError('Invalid Redis URL format')
        return v

    @validator('CORS_ORIGINS')
    def validate_cors_origins(cls, v):
        """Validate CORS origins in production"""
        environment = os.getenv('ENVIRONMENT', 'development')
        if environment == 'production' and ('*' in v or not v):
            raise ValueError('Wildcard CORS origins not allowed in production')
        return v

    @property
    def org_timezone(self) -> timezone:
        """Fixed organisational timezone used for event scheduling"""
        return timezone(timedelta(hours=self.ORG_UTC_OFFSET_HOURS))

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()

"""Application configuration with environment variable support."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.infrastructure.constants import ResilienceDefaults


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="student-address-services", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    service_role: Literal["address", "student"] = Field(
        default="student",
        alias="SERVICE_ROLE",
        description="Which service this process serves: 'address' or 'student'",
    )

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    workers: int = Field(default=1, alias="WORKERS")
    reload: bool = Field(default=False, alias="RELOAD")

    # API
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")
    docs_url: str = Field(default="/docs", alias="DOCS_URL")
    openapi_url: str = Field(default="/openapi.json", alias="OPENAPI_URL")

    # Rate Limiting (standard address route only, the nolimit route is exempt)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    address_rate_limit: str = Field(default="100/minute", alias="ADDRESS_RATE_LIMIT")

    # OpenTelemetry
    otel_enabled: bool = Field(default=False, alias="OTEL_ENABLED")
    otel_service_name: str = Field(default="student-address-services", alias="OTEL_SERVICE_NAME")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    otel_exporter_otlp_insecure: bool = Field(default=True, alias="OTEL_EXPORTER_OTLP_INSECURE")
    otel_trace_sample_rate: float = Field(default=1.0, alias="OTEL_TRACE_SAMPLE_RATE")

    # Address service (data served by the address role)
    address_data_file: str | None = Field(
        default=None,
        alias="ADDRESS_DATA_FILE",
        description="Optional JSON file with address records; built-in data is used otherwise",
    )
    flaky_failure_rate: float = Field(
        default=0.5,
        alias="FLAKY_FAILURE_RATE",
        description="Probability that a flaky resource call fails (0.0 - 1.0)",
    )
    flaky_random_seed: int | None = Field(default=None, alias="FLAKY_RANDOM_SEED")

    # Downstream address service (used by the student role)
    address_service_url: str = Field(default="http://localhost:8081", alias="ADDRESS_SERVICE_URL")
    address_service_flaky_path: str = Field(
        default="/api/v1/flaky", alias="ADDRESS_SERVICE_FLAKY_PATH"
    )
    http_timeout_seconds: float = Field(
        default=ResilienceDefaults.HTTP_TIMEOUT_SECONDS, alias="HTTP_TIMEOUT_SECONDS"
    )

    # Circuit breaker
    circuit_breaker_fail_max: int = Field(
        default=ResilienceDefaults.FAIL_MAX,
        alias="CIRCUIT_BREAKER_FAIL_MAX",
        description="Consecutive failures that open the circuit",
    )
    circuit_breaker_wait_duration_open: float = Field(
        default=ResilienceDefaults.RESET_TIMEOUT,
        alias="CIRCUIT_BREAKER_WAIT_DURATION_OPEN",
        description="Seconds the circuit stays open before allowing trial calls",
    )
    circuit_breaker_half_open_calls: int = Field(
        default=ResilienceDefaults.SUCCESS_THRESHOLD,
        alias="CIRCUIT_BREAKER_HALF_OPEN_CALLS",
    )

    # Bulkhead
    bulkhead_max_concurrent_calls: int = Field(
        default=ResilienceDefaults.BULKHEAD_MAX_CONCURRENT_CALLS,
        alias="BULKHEAD_MAX_CONCURRENT_CALLS",
    )
    bulkhead_max_wait_seconds: float = Field(
        default=ResilienceDefaults.BULKHEAD_MAX_WAIT_SECONDS,
        alias="BULKHEAD_MAX_WAIT_SECONDS",
        description="How long a call may queue for a slot; 0 rejects immediately",
    )
    bulkhead_nolimit_max_concurrent_calls: int = Field(
        default=ResilienceDefaults.BULKHEAD_NOLIMIT_MAX_CONCURRENT_CALLS,
        alias="BULKHEAD_NOLIMIT_MAX_CONCURRENT_CALLS",
    )

    # Retry
    retry_max_attempts: int = Field(
        default=ResilienceDefaults.RETRY_MAX_ATTEMPTS, alias="RETRY_MAX_ATTEMPTS"
    )
    retry_wait_seconds: float = Field(
        default=ResilienceDefaults.RETRY_WAIT_SECONDS, alias="RETRY_WAIT_SECONDS"
    )
    retry_backoff_multiplier: float = Field(
        default=ResilienceDefaults.RETRY_BACKOFF_MULTIPLIER,
        alias="RETRY_BACKOFF_MULTIPLIER",
        description="Exponential backoff base; 1.0 gives a fixed wait",
    )
    retry_max_wait_seconds: float = Field(
        default=ResilienceDefaults.RETRY_MAX_WAIT_SECONDS, alias="RETRY_MAX_WAIT_SECONDS"
    )

    @field_validator("flaky_failure_rate")
    @classmethod
    def validate_flaky_failure_rate(cls, v: float) -> float:
        """Validate flaky failure rate is a probability."""
        if v < 0.0 or v > 1.0:
            raise ValueError("FLAKY_FAILURE_RATE must be between 0.0 and 1.0")
        return v

    @field_validator(
        "circuit_breaker_fail_max",
        "circuit_breaker_half_open_calls",
        "bulkhead_max_concurrent_calls",
        "bulkhead_nolimit_max_concurrent_calls",
        "retry_max_attempts",
    )
    @classmethod
    def validate_positive_count(cls, v: int) -> int:
        """Validate resilience counts are at least one."""
        if v < 1:
            raise ValueError("Resilience counts must be at least 1")
        return v

    @field_validator(
        "circuit_breaker_wait_duration_open",
        "bulkhead_max_wait_seconds",
        "retry_wait_seconds",
        "retry_max_wait_seconds",
        "http_timeout_seconds",
    )
    @classmethod
    def validate_non_negative_duration(cls, v: float) -> float:
        """Validate durations are not negative."""
        if v < 0:
            raise ValueError("Durations must not be negative")
        return v

    @field_validator("retry_backoff_multiplier")
    @classmethod
    def validate_backoff_multiplier(cls, v: float) -> float:
        """Validate the backoff never shrinks the wait between attempts."""
        if v < 1.0:
            raise ValueError("RETRY_BACKOFF_MULTIPLIER must be at least 1.0")
        return v

    @field_validator("address_service_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended."""
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Registry settings loaded from environment variables.

    Required environment variables:
    - COMPANIES_HOUSE_API_KEY: API key from Companies House
    - LAND_REGISTRY_API_KEY: API key for HM Land Registry

    Optional:
    - COMPANIES_HOUSE_BASE_URL / LAND_REGISTRY_BASE_URL: override the
      public endpoints (e.g. for a sandbox)
    - REQUEST_TIMEOUT: per-request timeout in seconds
    - RETRY_ATTEMPTS: attempts per operation made by the command line
    - VALIDATE_POSTCODES: reject malformed postcodes before calling the registry
    - LOG_LEVEL: logging level for the command line

    Settings are read by the command line and handed to the clients
    explicitly; the clients never read the environment themselves.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API Keys - required for operation
    companies_house_api_key: str
    land_registry_api_key: str

    # Endpoints
    companies_house_base_url: str = "https://api.company-information.service.gov.uk"
    land_registry_base_url: str = "https://landregistry.data.gov.uk"

    # Config
    request_timeout: float = 30.0
    retry_attempts: int = 3
    validate_postcodes: bool = True
    log_level: str = "INFO"

    @field_validator("companies_house_api_key", "land_registry_api_key")
    @classmethod
    def validate_api_keys(cls, v: str, info) -> str:
        """Validate that API keys are not empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must be set and non-empty")
        return v.strip()

    @field_validator("companies_house_base_url", "land_registry_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base URL format."""
        v = v.strip().rstrip("/")
        if not v.startswith(("https://", "http://")):
            raise ValueError("Registry base URLs must be HTTP(S) URLs")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RETRY_ATTEMPTS must be at least 1")
        return v

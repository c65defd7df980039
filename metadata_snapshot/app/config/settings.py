from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from metadata_snapshot.app.constants import DEFAULT_MAX_DEPTH, DEFAULT_REQUEST_TIMEOUT_SECONDS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    container_metadata_file: str | None = Field(None, validation_alias="ECS_CONTAINER_METADATA_FILE")
    credentials_relative_uri: str | None = Field(
        None,
        validation_alias="AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",
    )

    # Every metadata request gets its own timeout; there is no crawl-wide deadline.
    fetch_connect_timeout_seconds: float = Field(
        DEFAULT_REQUEST_TIMEOUT_SECONDS,
        validation_alias="FETCH_CONNECT_TIMEOUT_SECONDS",
    )
    fetch_read_timeout_seconds: float = Field(
        DEFAULT_REQUEST_TIMEOUT_SECONDS,
        validation_alias="FETCH_READ_TIMEOUT_SECONDS",
    )

    max_depth: int = Field(DEFAULT_MAX_DEPTH, validation_alias="METADATA_MAX_DEPTH")
    parallel_branches: bool = Field(True, validation_alias="PARALLEL_BRANCHES")

    expvar_name: str = Field("aws", validation_alias="EXPVAR_NAME")

    @field_validator("container_metadata_file", "credentials_relative_uri", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

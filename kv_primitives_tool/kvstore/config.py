"""
Store connection configuration.
"""

from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_STORE_URL, DYNAMODB_SCHEME, REDIS_SCHEMES
from .exceptions import InvalidArgumentError


class StoreConfig(BaseSettings):
    """
    Where the store lives and how keys are namespaced.

    Values not passed explicitly are read from KVSTORE_URL,
    KVSTORE_KEY_PREFIX, KVSTORE_SOCKET_TIMEOUT, AWS_REGION and AWS_PROFILE.

    Attributes:
        url: Connection target, e.g. 'redis://localhost:6379/0' or 'dynamodb://my-table'
        key_prefix: Optional string prepended to every key
        region: AWS region (DynamoDB only, optional)
        profile: AWS profile (DynamoDB only, optional)
        socket_timeout: Seconds before a Redis command times out (optional)
    """

    url: str = DEFAULT_STORE_URL
    key_prefix: str | None = None
    region: str | None = Field(default=None, validation_alias="AWS_REGION")
    profile: str | None = Field(default=None, validation_alias="AWS_PROFILE")
    socket_timeout: float | None = Field(default=None, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="KVSTORE_",
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("key_prefix", "region", "profile", mode="before")
    @classmethod
    def _empty_as_none(cls, value: str | None) -> str | None:
        return value or None

    @property
    def scheme(self) -> str:
        scheme = urlparse(self.url).scheme
        if scheme not in REDIS_SCHEMES and scheme != DYNAMODB_SCHEME:
            raise InvalidArgumentError(
                f"Unsupported store URL '{self.url}'. "
                f"Use redis://host:port/db or dynamodb://table-name"
            )
        return scheme

    @property
    def table_name(self) -> str:
        """DynamoDB table name taken from the URL host part."""
        parsed = urlparse(self.url)
        name = parsed.netloc or parsed.path.lstrip("/")
        if not name:
            raise InvalidArgumentError(f"Store URL '{self.url}' does not name a table")
        return name

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build configuration from environment variables only."""
        return cls()

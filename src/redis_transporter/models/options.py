"""Per-call transporter options."""

from urllib.parse import quote

from pydantic import ConfigDict, Field

from redis_transporter.config import get_settings

from .base import TransporterBaseModel


class RedisOptions(TransporterBaseModel):
    """Redis endpoint descriptor.

    Either a full ``uri`` or ``host``/``port`` with optional credentials.
    When both are given the uri wins.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    uri: str | None = Field(default=None, description="Redis URL, e.g. redis://localhost:6379")
    host: str | None = Field(default=None, description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    tls: bool = Field(default=False, description="Connect with rediss://")
    username: str | None = Field(default=None, description="ACL user name")
    password: str | None = Field(default=None, description="Redis password")
    database: int = Field(default=0, ge=0, description="Database number")

    @property
    def url(self) -> str:
        """Build Redis URL."""
        if self.uri:
            return self.uri
        if not self.host:
            return get_settings().default_uri

        scheme = "rediss" if self.tls else "redis"
        auth = ""
        if self.password:
            user = quote(self.username, safe="") if self.username else ""
            auth = f"{user}:{quote(self.password, safe='')}@"
        return f"{scheme}://{auth}{self.host}:{self.port}/{self.database}"


class TransporterOptions(TransporterBaseModel):
    """Options supplied by the host with every connect and action."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    prefix: str = Field(min_length=1, description="Namespace for every key")
    redis: RedisOptions = Field(default_factory=RedisOptions)
    connection_timeout: float | None = Field(
        default=None,
        gt=0,
        alias="connectionTimeout",
        description="Idle milliseconds before auto-disconnect",
    )

    @property
    def idle_timeout(self) -> float:
        """Effective idle timeout in seconds.

        ``connectionTimeout`` is given in milliseconds, as hosts send it.
        """
        timeout = self.connection_timeout
        if timeout is None:
            timeout = get_settings().default_connection_timeout
        return timeout / 1000

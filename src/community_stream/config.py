"""Application settings, read from the environment once at startup."""
import os
from dataclasses import dataclass, field

DEFAULT_COMMUNITY_WALLET = "0x742d35Cc6634C0532925a3b844Bc9e7595f6E456"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    database_url: SQLAlchemy URL; None selects the in-memory store.
    community_address: destination wallet for every stream.
    payments_*: external payment network (BasePay-compatible REST API).
    """

    database_url: str | None = None
    sql_echo: bool = False
    community_address: str = DEFAULT_COMMUNITY_WALLET
    payments_api_url: str = "https://api.pay.base.org"
    payments_api_key: str | None = None
    payments_testnet: bool = True
    payments_timeout: float = 10.0
    messages_default_limit: int = 50
    realtime_send_timeout: float = 5.0
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        origins = os.getenv("CORS_ORIGINS", "")
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            sql_echo=os.getenv("SQL_ECHO", "0") == "1",
            community_address=os.getenv("COMMUNITY_WALLET_ADDRESS", DEFAULT_COMMUNITY_WALLET),
            payments_api_url=os.getenv("PAYMENTS_API_URL", cls.payments_api_url),
            payments_api_key=os.getenv("PAYMENTS_API_KEY") or None,
            payments_testnet=_env_bool("PAYMENTS_TESTNET", True),
            payments_timeout=float(os.getenv("PAYMENTS_TIMEOUT", "10")),
            messages_default_limit=int(os.getenv("MESSAGES_DEFAULT_LIMIT", "50")),
            realtime_send_timeout=float(os.getenv("REALTIME_SEND_TIMEOUT", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

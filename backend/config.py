import os
import logging
from typing import Dict, List, Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_USAGE_ENDPOINT = "https://app.factory.ai/api/organization/members/chat-usage"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_DISPLAY_UTC_OFFSET_HOURS = 8.0
DEFAULT_CREDENTIAL_STORE_PATH = "./data/api-keys.json"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    @classmethod
    def reload(cls) -> "Config":
        """Re-read the environment (used by tests and the CLI)."""
        cls._instance = None
        return cls()

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"
        self.usage_endpoint = os.environ.get("USAGE_ENDPOINT", DEFAULT_USAGE_ENDPOINT)
        self.user_agent = os.environ.get("USER_AGENT", DEFAULT_USER_AGENT)
        self.request_timeout = float(os.environ.get("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT))
        # 0 disables the cap: every credential is fetched at once
        self.max_concurrency = int(os.environ.get("MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY))
        self.display_utc_offset_hours = float(
            os.environ.get("DISPLAY_UTC_OFFSET_HOURS", DEFAULT_DISPLAY_UTC_OFFSET_HOURS)
        )
        self.credential_store = os.environ.get("CREDENTIAL_STORE", "json").lower()
        self.credential_store_path = os.environ.get("CREDENTIAL_STORE_PATH", DEFAULT_CREDENTIAL_STORE_PATH)
        self.report_balances = _env_bool("REPORT_BALANCES", "true")
        self.allowed_origins: List[str] = [
            o.strip() for o in os.environ.get("ALLOWED_ORIGINS", "").split(",") if o.strip()
        ]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "usage_endpoint": self.usage_endpoint,
            "request_timeout": self.request_timeout,
            "max_concurrency": self.max_concurrency,
            "display_utc_offset_hours": self.display_utc_offset_hours,
            "credential_store": self.credential_store,
            "report_balances": self.report_balances,
        }


config = Config()


def get_config() -> Config:
    return config


def create_usage_fetcher(cfg: Config):
    """Create the outbound usage fetcher (always httpx)."""
    from adapters.http.usage_fetcher import HttpxUsageFetcher
    return HttpxUsageFetcher(
        endpoint=cfg.usage_endpoint,
        user_agent=cfg.user_agent,
        timeout=cfg.request_timeout,
    )


def create_infra_adapters(cfg: Config):
    """Create the credential store and balance sink from CREDENTIAL_STORE / REPORT_BALANCES."""
    from adapters.local.json_file_credential_store import JsonFileCredentialStore
    from adapters.local.memory_credential_store import InMemoryCredentialStore
    from adapters.local.log_balance_sink import LogBalanceSink
    from adapters.local.noop_balance_sink import NoOpBalanceSink

    store_kind = cfg.credential_store

    if store_kind == "json":
        store = JsonFileCredentialStore(cfg.credential_store_path)
    elif store_kind == "memory":
        store = InMemoryCredentialStore()
    else:
        raise ValueError(f"Unknown CREDENTIAL_STORE: {store_kind!r}. Valid options: json, memory")

    adapters = {
        "credential_store": store,
        "balance_sink": LogBalanceSink() if cfg.report_balances else NoOpBalanceSink(),
    }

    logger.info(f"Infra adapters: {', '.join(type(v).__name__ for v in adapters.values())}")
    return adapters

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE = "https://localhost:7026/api"
DEFAULT_TOKEN_FILE = Path.home() / ".expense_tracker" / "session.json"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def _timeout(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    """Endpoint and client settings for the dashboard.

    The transaction, category and auth URLs default to paths under
    ``api_base`` but each can be overridden on its own.
    """

    api_base: str = DEFAULT_API_BASE
    transactions_url: str = DEFAULT_API_BASE + "/Transaction"
    categories_url: str = DEFAULT_API_BASE + "/Category"
    login_url: str = DEFAULT_API_BASE + "/Auth/login"
    register_url: str = DEFAULT_API_BASE + "/Users/register"
    currency: str = "USD"
    token_file: Path = DEFAULT_TOKEN_FILE
    verify_tls: bool = True
    request_timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "Settings":
        if env is None:
            load_dotenv()
            env = os.environ

        api = env.get("EXPENSE_API_BASE", DEFAULT_API_BASE).rstrip("/")
        return cls(
            api_base=api,
            transactions_url=env.get("EXPENSE_TRANSACTIONS_URL", f"{api}/Transaction"),
            categories_url=env.get("EXPENSE_CATEGORIES_URL", f"{api}/Category"),
            login_url=env.get("EXPENSE_LOGIN_URL", f"{api}/Auth/login"),
            register_url=env.get("EXPENSE_REGISTER_URL", f"{api}/Users/register"),
            currency=env.get("EXPENSE_CURRENCY", "USD"),
            token_file=Path(env.get("EXPENSE_TOKEN_FILE") or DEFAULT_TOKEN_FILE).expanduser(),
            verify_tls=_flag(env.get("EXPENSE_VERIFY_TLS"), True),
            request_timeout=_timeout(env.get("EXPENSE_REQUEST_TIMEOUT")),
            log_level=env.get("EXPENSE_LOG_LEVEL", "INFO").upper(),
        )

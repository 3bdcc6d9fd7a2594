from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_HERE = Path(__file__).resolve()
_PROJECT_ROOT = _HERE.parents[1]

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; DefaultAnswer/1.0; LLM Recommendation Analysis)"


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name, "").strip()
    return max(minimum, int(raw)) if raw else default


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name, "").strip()
    return max(minimum, float(raw)) if raw else default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    timeout_s: float = 10.0
    max_redirects: int = 5
    max_body_bytes: int = 512 * 1024
    hard_limit_bytes: int = 8 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    history_backend: str = ""
    supabase_url: str = ""
    supabase_key: str = ""
    history_table: str = "defaultanswer_scans"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        # Local dev keeps secrets in the project root .env; real env vars win.
        load_dotenv(_PROJECT_ROOT / ".env", override=False)
        return cls(
            timeout_s=_env_float("DEFAULTANSWER_TIMEOUT_S", 10.0, minimum=0.5),
            max_redirects=_env_int("DEFAULTANSWER_MAX_REDIRECTS", 5, minimum=0),
            max_body_bytes=_env_int("DEFAULTANSWER_MAX_BODY_KB", 512, minimum=1) * 1024,
            hard_limit_bytes=_env_int("DEFAULTANSWER_HARD_LIMIT_KB", 8192, minimum=1) * 1024,
            user_agent=_env_str("DEFAULTANSWER_USER_AGENT", DEFAULT_USER_AGENT),
            cors_origins=_env_list("DEFAULTANSWER_CORS_ORIGINS", ["http://localhost:3000"]),
            history_backend=_env_str("DEFAULTANSWER_HISTORY_BACKEND", "").lower(),
            supabase_url=_env_str("SUPABASE_URL", ""),
            supabase_key=_env_str("SUPABASE_SERVICE_ROLE_KEY", ""),
            history_table=_env_str("DEFAULTANSWER_HISTORY_TABLE", "defaultanswer_scans"),
            log_level=_env_str("DEFAULTANSWER_LOG_LEVEL", "INFO").upper(),
        )

import os
from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_SUBJECTS_FILE = Path(__file__).resolve().parent / "data" / "subjects.json"


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    supabase_url: str = ""
    supabase_key: str = ""
    subjects_file: str = str(DEFAULT_SUBJECTS_FILE)
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # Applies to the endpoints that write or render (save, report)
    rate_limit: str = "30/minute"
    recent_calculations_limit: int = 20

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})

import os
from pydantic_settings import BaseSettings


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
    gemini_api_key: str = ""
    chat_model: str = "gemini-2.5-pro"
    fast_model: str = "gemini-2.5-flash"
    chat_temperature: float = 0.7
    import_temperature: float = 0.1

    max_upload_size_mb: int = 5
    max_message_length: int = 4000
    chat_rate_limit: str = "20/minute"
    import_rate_limit: str = "5/minute"
    max_workspaces: int = 1000

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})

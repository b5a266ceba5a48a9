# deskcrm/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# load .env into process env vars
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")


def _as_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in ("1", "true", "yes", "y", "on")


def _as_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, default)).strip())
    except Exception:
        return default


def _as_float(name: str, default: float | None) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    # 0 or negative means "wait forever"
    return value if value > 0 else None


class Settings:
    # App
    ENV: str = os.getenv("ENV", "dev")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = _as_int("PORT", 8765)

    # Storage (per-installation data directory)
    DATA_DIR: str = os.getenv("DATA_DIR", str(Path.home() / ".deskcrm"))
    DATA_FILE_NAME: str = os.getenv("DATA_FILE_NAME", "data.json")

    # Logging
    LOG_DIR: str = os.getenv("LOG_DIR", str(ROOT / "logs"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_FILE: bool = _as_bool("LOG_TO_FILE", True)

    # Sessions
    JWT_SECRET: str = (os.getenv("JWT_SECRET") or "dev-secret-change-me").strip()
    SESSION_TTL_MINUTES: int = _as_int("SESSION_TTL_MINUTES", 60 * 12)
    SESSION_FILE: str = os.getenv("SESSION_FILE", str(Path.home() / ".deskcrm" / "session.json"))

    # Credentials
    PASSWORD_HASH_ITERATIONS: int = _as_int("PASSWORD_HASH_ITERATIONS", 260_000)
    DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")
    DEFAULT_ADMIN_EMAIL: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")

    # Client side
    HOST_URL: str = os.getenv("HOST_URL", f"http://127.0.0.1:{_as_int('PORT', 8765)}")
    HOST_TIMEOUT_SECONDS: float | None = _as_float("HOST_TIMEOUT_SECONDS", None)

    @property
    def data_file(self) -> Path:
        return Path(self.DATA_DIR) / self.DATA_FILE_NAME


# instantiate settings
settings = Settings()

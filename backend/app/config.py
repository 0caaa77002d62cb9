# app/config.py
import os
from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv


def env_file_path() -> Path:
    """The `.env` the container entrypoint maintains: APP_BASE_DIR, else the cwd."""
    return Path(os.getenv("APP_BASE_DIR") or os.getcwd()) / ".env"


def load_env_file() -> Path:
    """Load the base-directory `.env` into os.environ (existing variables win)."""
    path = env_file_path()
    load_dotenv(dotenv_path=path)
    return path


ENV_PATH = load_env_file()

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "Backend API")
    env: str = os.getenv("APP_ENV", "local").lower()
    debug: bool = os.getenv("APP_DEBUG", "false").lower() in ("true", "1", "yes")

    # Host & Port settings (the entrypoint always binds 0.0.0.0)
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("APP_PORT", "8000"))

    # Where `.env`, storage/, bootstrap/cache and public/ live
    base_dir: Path = Path(os.getenv("APP_BASE_DIR") or os.getcwd())

    # CORS origins for the frontend (comma-separated in FRONTEND_ORIGINS)
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("FRONTEND_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]

    # Access tokens
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "bootstrap" / "cache"

    @property
    def view_cache_dir(self) -> Path:
        return self.base_dir / "storage" / "framework" / "views"

settings = Settings()  # Instantiate configuration

from pydantic_settings import BaseSettings  # type: ignore
from typing import Optional

# Load .env file if it exists
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass


class Settings(BaseSettings):
    # Core
    MODE: str = "dev"  # dev, prod
    DEV_MODE: bool = False

    # Persistence
    STORE_BACKEND: str = "memory"  # memory, json, redis
    JSON_STORE_PATH: str = "data/rotator_store.json"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "rotator:"

    # Security
    ADMIN_TOKEN: Optional[str] = None

    # SEMP transport
    SEMP_TIMEOUT_SECONDS: float = 30.0
    SEMP_MAX_RESPONSE_BYTES: int = 1 << 20

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    ROTATION_TICK_INTERVAL_SEC: int = 60

    # Observability
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore"
    }

    @property
    def is_dev(self) -> bool:
        return self.MODE.lower() == "dev" or self.DEV_MODE

    def validate_for_startup(self) -> None:
        """Fail fast on configurations that are unsafe outside dev."""
        if self.MODE.lower() != "prod":
            return
        if not self.ADMIN_TOKEN:
            raise RuntimeError("In PROD, ADMIN_TOKEN must be set")
        if self.STORE_BACKEND.lower() == "memory":
            raise RuntimeError("In PROD, STORE_BACKEND must be 'json' or 'redis'")


settings = Settings()

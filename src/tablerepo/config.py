import os
from dataclasses import dataclass

from dotenv import load_dotenv


def load_env_file(environment: str) -> None:
    """Load .env.<environment> if it exists, otherwise the default .env file."""
    env_file = f".env.{environment}"
    if os.path.exists(env_file):
        load_dotenv(env_file)
    else:
        # Fall back to the default .env file
        load_dotenv()


# Load the appropriate .env file on module import
env = os.environ.get("TABLEREPO_ENV", "development").lower()
load_env_file(env)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    environment: str
    database_url: str | None
    placeholder: str
    connect_timeout: int
    strict_columns: bool

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get("DATABASE_URL") or None,
            placeholder=os.environ.get("TABLEREPO_PLACEHOLDER", "%s"),
            connect_timeout=int(os.environ.get("TABLEREPO_CONNECT_TIMEOUT", "10")),
            strict_columns=_env_flag("TABLEREPO_STRICT_COLUMNS"),
        )


config = Config.from_env()

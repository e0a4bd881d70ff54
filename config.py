# Ally Connector - configuration
from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    secret_key: str = "dev-secret-change-in-production"
    database_url: str = "sqlite+aiosqlite:///./ally.db"
    # Role shortnames whose holders count as content authors
    author_roles: list[str] = ["manager", "coursecreator", "editingteacher"]
    audit_log_file: Path = Path("./data/audit_log.jsonl")

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()

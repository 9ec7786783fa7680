import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str | None = os.getenv("JWT_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", 60))

    # Full URL wins over the individual DB_* parts
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT")
    DB_NAME: str | None = os.getenv("DB_NAME")

    # Tiendanube (remote catalog)
    TIENDANUBE_STORE_ID: str | None = os.getenv("TIENDANUBE_STORE_ID")
    TIENDANUBE_TOKEN: str | None = os.getenv("TIENDANUBE_TOKEN")
    TIENDANUBE_USER_AGENT: str | None = os.getenv("TIENDANUBE_USER_AGENT")
    TIENDANUBE_API_VERSION: str = os.getenv("TIENDANUBE_API_VERSION", "2025-03")
    TIENDANUBE_TIMEOUT: int = int(os.getenv("TIENDANUBE_TIMEOUT", 30))

    PUSH_PACING_SECONDS: float = float(os.getenv("PUSH_PACING_SECONDS", 0.2))
    STOCK_SYNC_CHUNK_SIZE: int = int(os.getenv("STOCK_SYNC_CHUNK_SIZE", 50))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings) -> str:
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    if cfg.DB_HOST:
        return (
            f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.DB_NAME}"
        )
    return "sqlite:///./catalog.db"


CATALOG_DATABASE_URL = build_database_url(settings)

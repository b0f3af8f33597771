import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "Kinship API"
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # -------------------------------------------------------
    # Database
    # -------------------------------------------------------
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./kinship.db"
    )

    # Render uses postgres:// but SQLAlchemy needs postgresql://
    if DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    # -------------------------------------------------------
    # Connection store
    # -------------------------------------------------------
    # sqlalchemy | supabase
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "sqlalchemy")

    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")

    # -------------------------------------------------------
    # Graph processing
    # -------------------------------------------------------
    UNION_MIN_SHARED_CHILDREN: int = int(
        os.getenv("UNION_MIN_SHARED_CHILDREN", 1)
    )
    UNION_INCLUDE_SINGLE_PARENTS: bool = _env_bool(
        "UNION_INCLUDE_SINGLE_PARENTS", False
    )
    MAX_TRAVERSAL_DEPTH: int = int(os.getenv("MAX_TRAVERSAL_DEPTH", 10))

    # -------------------------------------------------------
    # CORS
    # -------------------------------------------------------
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


# Single instance that is imported everywhere
settings = Settings()

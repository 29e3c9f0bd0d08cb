import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "Archivo API"
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # -------------------------------------------------------
    # Database
    # -------------------------------------------------------
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./archivo.db"
    )

    # Hosted Postgres hands out postgres:// but SQLAlchemy needs postgresql://
    if DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    # -------------------------------------------------------
    # Authentication / sessions
    # -------------------------------------------------------
    SECRET_KEY: str = os.getenv(
        "SECRET_KEY",
        "archivo-local-dev-key"   # Only used for local dev
    )
    ALGORITHM: str = "HS256"

    # 7 days by default
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7)
    )
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "archivo_session")

    # Comma separated, "*" during development
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    # -------------------------------------------------------
    # Public base URL (used to build absolute media URLs)
    # -------------------------------------------------------
    BASE_URL: str = os.getenv(
        "BASE_URL",
        "http://127.0.0.1:8000"
    )

    # -------------------------------------------------------
    # Storage Configuration
    # -------------------------------------------------------
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")

    # Local upload folder, served under /uploads
    LOCAL_MEDIA_PATH: str = os.getenv(
        "LOCAL_MEDIA_PATH",
        "./uploads"
    )

    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
    SUPABASE_BUCKET: str = os.getenv("SUPABASE_BUCKET", "media")

    MAX_IMAGE_SIZE: int = int(os.getenv("MAX_IMAGE_SIZE", 5 * 1024 * 1024))
    MAX_VIDEO_SIZE: int = int(os.getenv("MAX_VIDEO_SIZE", 50 * 1024 * 1024))


# Single instance that is imported everywhere
settings = Settings()

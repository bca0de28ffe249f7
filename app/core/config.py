from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"
    ENV: str = "dev"  # "dev" or "prod"

    # --- STORAGE (Supabase bucket for registration photos) ---
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    STORAGE_BUCKET: str = "student-photos"
    MAX_PHOTO_SIZE_MB: int = 5

    # --- EMAIL SETTINGS ---
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 2525  # Default to Mailtrap port
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    EMAILS_FROM_EMAIL: str = "no-reply@hostel.local"
    EMAILS_FROM_NAME: str = "Hostel Management"
    FRONTEND_URL: str = "http://localhost:5173"

    # Rate limiter storage; in-memory when unset
    REDIS_URL: str | None = None

    # --- HOSTEL RULES ---
    PASS_OUT_MIN_ACADEMIC_YEAR: int = 4
    SEED_ROOMS: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()

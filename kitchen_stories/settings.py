from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Shared admin secret for create/update/delete
    admin_password: str = "ryo123"

    host: str = "0.0.0.0"
    port: int = 3000

    database_url: str = "sqlite:///./recipes.db"
    db_echo: bool = False

    # Image uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_image_types: list[str] = ["jpeg", "jpg", "png", "gif", "webp"]

    # Frontend bundle served at "/" when present
    public_dir: str = "public"

    # CORS
    cors_origins: list[str] = ["*"]

    # Rate limiter (per-IP)
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True

    # Insert the sample recipes when the catalog is empty
    seed_sample_data: bool = True

    # Reject malformed ingredients/instructions JSON instead of dropping it
    strict_child_payloads: bool = False

    # Require the admin password for PATCH /recipes/{id}/favorite
    gate_favorite_toggle: bool = False


settings = Settings()

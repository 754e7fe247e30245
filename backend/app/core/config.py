from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "library_catalog"
    environment: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    database_url: str = "sqlite:///./library.db"
    auto_create_schema: bool = True

    admin_username: str | None = None
    admin_password_hash: str | None = None
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 8

    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_folder: str = "library_pdfs"
    asset_timeout: int = 60
    strict_asset_delete: bool = False

    default_page_size: int = 12

    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "prod"


settings = Settings()

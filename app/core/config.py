"""Parámetros del servicio leídos de variables de entorno o de .env."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Asistencia y Evaluaciones API"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]

    # Sesión
    jwt_secret_key: str = "cambiar-en-produccion-clave-secreta-muy-segura"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24

    # Base de datos; DATABASE_URL tiene prioridad sobre los POSTGRES_*
    database_url: str | None = None
    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "asistencia_evaluaciones_bd"

    @property
    def database_url_async(self) -> str:
        if self.database_url:
            return self.database_url
        credenciales = f"{self.postgres_user}:{self.postgres_password}"
        servidor = f"{self.postgres_host}:{self.postgres_port}"
        return f"postgresql+asyncpg://{credenciales}@{servidor}/{self.postgres_db}"


settings = Settings()

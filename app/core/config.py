from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PostgresSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="flashmob", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    def connection_string(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    model_name: str = Field(default="gemini-2.0-flash", alias="GENERATION_MODEL")
    timeout_seconds: float = Field(default=45.0, alias="GENERATION_TIMEOUT_SECONDS")
    max_text_length: int = Field(default=10_000, alias="GENERATION_MAX_TEXT_LENGTH")
    default_count: int = Field(default=5, alias="GENERATION_DEFAULT_COUNT")
    max_output_tokens: int = Field(default=1024, alias="GENERATION_MAX_OUTPUT_TOKENS")
    temperature: float = Field(default=0.6, alias="GENERATION_TEMPERATURE")
    top_p: float = Field(default=0.9, alias="GENERATION_TOP_P")
    # num_questions is not capped; requests above this are only logged
    large_count_warning: int = Field(
        default=50, alias="GENERATION_LARGE_COUNT_WARNING"
    )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="flashmob", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=5000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000", alias="CORS_ORIGINS"
    )

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"

    @computed_field
    def is_testing(self) -> bool:
        return self.mode == "test"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    postgres: PostgresSettings = Field(default_factory=lambda: PostgresSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")


settings = Settings()

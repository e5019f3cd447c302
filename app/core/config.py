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
    db_name: str = Field(default="smartflash", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")
    # Full SQLAlchemy async URL; wins over the discrete fields when set
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    def connection_string(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db_name}"
        )


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    issuer: str = Field(default="https://auth.smartflash.local", alias="JWT_ISSUER")
    application_id: str = Field(default="smartflash", alias="JWT_APPLICATION_ID")
    token_lifetime_seconds: int = Field(
        default=7 * 24 * 3600, alias="JWT_TOKEN_LIFETIME_SECONDS"
    )
    key_file: str = Field(default="jwt_rsa_key.pem", alias="JWT_KEY_FILE")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="smartflash", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    jwt_secret: str = Field(alias="JWT_SECRET")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8081"],
        alias="CORS_ORIGINS",
    )

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class VertexAISettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
    # Inline service-account JSON or a path to a JSON file
    credentials: Optional[str] = Field(
        default=None, alias="GOOGLE_VERTEX_AI_CREDENTIALS"
    )
    project_id: Optional[str] = Field(default=None, alias="GOOGLE_CLOUD_PROJECT")
    location: str = Field(default="us-central1", alias="GOOGLE_VERTEX_AI_LOCATION")
    model: str = Field(default="gemini-1.5-pro", alias="GOOGLE_VERTEX_AI_MODEL")
    temperature: float = Field(default=0.7, alias="GOOGLE_VERTEX_AI_TEMPERATURE")
    max_output_tokens: int = Field(
        default=2048, alias="GOOGLE_VERTEX_AI_MAX_OUTPUT_TOKENS"
    )


class GoogleGeminiSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
    api_key: Optional[str] = Field(default=None, alias="GOOGLE_GEMINI_API_KEY")
    model: str = Field(default="gemini-2.0-flash", alias="GOOGLE_GEMINI_MODEL")
    temperature: float = Field(default=0.7, alias="GOOGLE_GEMINI_TEMPERATURE")
    max_output_tokens: int = Field(
        default=2048, alias="GOOGLE_GEMINI_MAX_OUTPUT_TOKENS"
    )


class OpenAISettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4", alias="OPENAI_MODEL")
    temperature: float = Field(default=0.7, alias="OPENAI_TEMPERATURE")
    max_tokens: int = Field(default=2048, alias="OPENAI_MAX_TOKENS")


class OpenRouterSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
    api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")
    base_url: str = Field(
        default="https://openrouter.ai/api/v1", alias="OPENROUTER_BASE_URL"
    )
    model: str = Field(default="anthropic/claude-3-sonnet", alias="OPENROUTER_MODEL")
    temperature: float = Field(default=0.7, alias="OPENROUTER_TEMPERATURE")
    max_tokens: int = Field(default=2048, alias="OPENROUTER_MAX_TOKENS")


class AISettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Raw value; resolved (with fallback) by app.modules.ai.factory
    provider: Optional[str] = Field(default=None, alias="AI_PROVIDER")
    module_timeout_seconds: float = Field(
        default=120.0, alias="AI_MODULE_TIMEOUT_SECONDS"
    )

    vertex_ai: VertexAISettings = Field(default_factory=lambda: VertexAISettings())
    google_gemini: GoogleGeminiSettings = Field(
        default_factory=lambda: GoogleGeminiSettings()
    )
    openai: OpenAISettings = Field(default_factory=lambda: OpenAISettings())
    openrouter: OpenRouterSettings = Field(
        default_factory=lambda: OpenRouterSettings()
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    postgres: PostgresSettings = Field(default_factory=lambda: PostgresSettings())
    jwt: JWTSettings = Field(default_factory=lambda: JWTSettings())
    ai: AISettings = Field(default_factory=lambda: AISettings())


settings = Settings()

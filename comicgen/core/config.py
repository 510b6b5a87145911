from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "comicgen"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./comicgen.db"
    redis_url: str = "redis://localhost:6379/0"

    openai_api_key: str | None = None
    openai_text_model: str = "gpt-4o"
    openai_image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    image_quality: str = "standard"

    # Pipeline knobs
    stage_max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    stage_timeout_seconds: float = 600.0
    http_timeout_seconds: float = 30.0
    min_article_chars: int = 100
    min_summary_chars: int = 10
    max_parts: int = 10

    admin_password: str | None = None

settings = Settings()

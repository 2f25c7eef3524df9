from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./lifeclock.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # Scoring window and countdown refresh rate
    SCORE_WINDOW_DAYS: int = 30
    COUNTDOWN_TICK_SECONDS: float = 1.0

    # Display toggles. Presentation only, never read by the engine.
    SHOW_GLOBAL_CLOCK: bool = True
    SHOW_MINUTE_BOXES: bool = True
    SHOW_SECOND_BOXES: bool = True
    SHOW_SCENARIO_CLOCKS: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

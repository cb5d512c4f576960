from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Floor Plan Estimator"
    DATABASE_URL: str = "sqlite:///./estimator.db"

    # AI vision service
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT_SECONDS: int = 120

    MAX_UPLOAD_MB: int = 10

    # Project defaults (used when a user has nothing saved)
    DEFAULT_CURRENCY: str = "INR"
    DEFAULT_WALL_HEIGHT_M: float = 3.0
    DEFAULT_BRICK_SIZE: str = "standard"  # 'standard' | 'modular'

    REPORT_FOOTER: str = "Generated by Floor Plan Estimator"

    class Config:
        env_file = ".env"


settings = Settings()

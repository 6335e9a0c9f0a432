from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/goals"
    api_key: str | None = None

    log_level: str = "INFO"
    sql_echo: bool = False  # echo SQL statements from the engine
    create_tables: bool = True  # create missing tables on startup

    # Currency assigned to accounts created without one
    default_currency: str = "RUB"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    DEFAULT_HORIZON_DAYS: int = 90
    MAX_HORIZON_DAYS: int = 730
    CHART_SAMPLE_CAP: int = 500
    NEAR_TERM_ITEMS: int = 100
    MAX_PERIOD_BUCKETS: int = 20
    BUCKET_SAMPLE_SIZE: int = 10
    MAX_SAVINGS_MONTHS: int = 12
    OPTIONAL_EXPENSE_CATEGORIES: list[str] = [
        "Entertainment",
        "Dining Out",
        "Food & Dining",
        "Shopping",
        "Travel",
        "Personal",
        "Clothing",
        "Gifts/Donations",
        "Subscriptions",
    ]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

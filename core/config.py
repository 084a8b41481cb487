from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./storefront.db"
    # Tokens are issued by the external auth provider, we only verify them
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    TOKEN_AUDIENCE: str | None = None
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    CHECKOUT_REVALIDATE_STOCK: bool = True
    SEED_CATALOG: bool = True


settings = Settings()

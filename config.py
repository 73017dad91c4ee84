from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# os.environ lookups outside Settings (PORT) see .env too
load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: Optional[str] = None

    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: str = "5432"
    DB_NAME: str = "postgres"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30

    INVOICE_PREFIX: str = "INV"
    INVOICE_ID_WIDTH: int = 6

    FIFO_RETRY_ATTEMPTS: int = 3
    LOG_LEVEL: str = "INFO"


    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

settings = Settings()

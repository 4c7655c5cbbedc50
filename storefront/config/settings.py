from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    DATABASE_URL: str
    DB_ECHO: bool = False

    # customer session tokens
    SESSION_SECRET: Optional[str] = None
    SESSION_TTL_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "cust_session"

    PIN_HASH_SCHEME: str = "pbkdf2_sha256"

    # chat
    MAX_CHAT_IMAGE_MB: float = 8
    CHAT_HISTORY_LIMIT: int = 300

    # identity provider (admin bearer tokens and federated customer login)
    IDENTITY_VERIFY_KEY: Optional[str] = None
    IDENTITY_ALGORITHMS: str = "RS256"
    IDENTITY_AUDIENCE: Optional[str] = None
    IDENTITY_ISSUER: Optional[str] = None
    IDENTITY_ADMIN_CLAIM: str = "admin"

    class Config:
        env_file = ".env"
        extra="ignore"

config_settings = Settings()

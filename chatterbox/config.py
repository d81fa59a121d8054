from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Read from the environment (or ``.env``); field names match variable names."""

    mongo_uri: str = Field("mongodb://localhost:27017", description="MongoDB connection string")
    database_name: str = Field("chatter-box", description="Database holding all collections")
    jwt_secret: str = Field("your-secret-key-change-this", description="HS256 signing key for session tokens")
    access_token_expire_hours: int = Field(24, ge=1)
    environment: str = Field(
        "development",
        validation_alias=AliasChoices("APP_ENV", "environment"),
        description="'production' enables cross-site cookies",
    )
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173", "https://chatter-box-x.vercel.app"]
    )
    stripe_secret_key: Optional[str] = None
    membership_fee_cents: int = Field(500, ge=1, description="One-time Premium fee in the smallest currency unit")
    membership_currency: str = "usd"
    free_post_limit: int = Field(5, ge=0, description="Posts a Free member may create")
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [o.strip() for o in value.split(",") if o.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

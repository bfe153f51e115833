from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class MongoSettings(BaseModel):
    url: str = "mongodb://localhost:27017"
    db_name: str = "fleetyield"


class KafkaSettings(BaseModel):
    enabled: bool = False
    bootstrap_servers: str = "localhost:9092"
    topic: str = "fleetyield-audit"
    client_id: str = "fleetyield-engine"


class EngineSettings(BaseModel):
    historical_weeks: int = Field(default=12, ge=1)
    forecast_window: int = Field(default=4, ge=1)
    trend_window: int = Field(default=8, ge=2)
    default_capacity: int = Field(default=50, ge=1)


class AppConfig(BaseSettings):
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    settings_store: Literal["yaml", "mongo"] = "yaml"
    settings_file: str = "settings.yaml"
    log_level: str = "INFO"

    model_config = {
        "case_sensitive": False,
        "env_file": ".env",
        "extra": "ignore"
    }

import yaml
import os
from typing import Optional
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str


class ScheduleConfig(BaseModel):
    interval_seconds: int = 86400
    run_daily_digest: bool = True


class FactorWeights(BaseModel):
    """Points available for each scoring dimension."""
    industry: float = 30.0
    province: float = 20.0
    value_range: float = 25.0
    cidb_grade: float = 15.0
    bbbee_level: float = 10.0


class ScorerConfig(BaseModel):
    """
    Configuration for the ScoringEngine.

    Only the factor weights are tunable. The match (50) and high-priority
    (80) thresholds are fixed policy in core.matcher.service.
    """
    weights: FactorWeights = Field(default_factory=FactorWeights)


class MatchingConfig(BaseModel):
    """
    Top-level matching configuration.
    """
    enabled: bool = True
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)

    # Users matched in parallel during a batch run (1 = sequential)
    max_workers: int = 1

    # Upper bound on active tenders loaded per run, None = all
    tender_limit: Optional[int] = None


class NotificationConfig(BaseModel):
    """
    Configuration for notifications.

    Controls how match notifications and digests are delivered.
    Channel credentials (SMTP_*, TWILIO_*) are read from the environment.
    """
    enabled: bool = True

    # Base URL for links in notifications
    base_url: str = "https://tenderfind.co.za"

    # Per-send bound so one stuck provider call cannot stall a batch
    dispatch_timeout_seconds: float = 30.0

    # Local delivery pool size (used when the Redis queue is off or unreachable)
    max_workers: int = 4

    # Redis queue settings
    use_async_queue: bool = False
    redis_url: Optional[str] = None
    job_timeout_seconds: int = 300

    # Number of matches listed in the daily digest
    digest_max_matches: int = 5


class AppConfig(BaseModel):
    database: DatabaseConfig
    matching: Optional[MatchingConfig] = Field(default_factory=MatchingConfig)
    notifications: Optional[NotificationConfig] = Field(default_factory=NotificationConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try absolute or adjusted path
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        if 'database' not in data or data['database'] is None:
            data['database'] = {}
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if 'notifications' not in data or data['notifications'] is None:
            data['notifications'] = {}
        data['notifications']['redis_url'] = env_redis_url

    return AppConfig(**data)

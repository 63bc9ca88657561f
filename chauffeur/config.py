"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Branding / outbound messages
    brand_name: str = "WAYNE LIMO"
    payment_link_base_url: str = "https://pay.wayne-limo.com"

    # Telemetry simulator
    telemetry_enabled: bool = True
    position_drift_interval_seconds: float = 3.0
    position_drift_degrees: float = 0.0025  # max offset per tick, each axis
    flight_drift_interval_seconds: float = 5.0
    max_flight_delay_minutes: int = 60  # exclusive upper bound

    # Read surface
    poll_interval_seconds: float = 3.0

    # Notifications
    notification_queue_size: int = 1000
    notification_failure_history: int = 100

    # Application
    seed_demo_data: bool = True
    rate_limit: str = "100/minute"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

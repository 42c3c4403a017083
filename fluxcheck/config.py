"""
Runtime settings for fluxcheck.

Values are read from the environment (prefix ``FLUXCHECK_``) or a local
``.env`` file, e.g. ``FLUXCHECK_PARSE_DEBUG=true``.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FLUXCHECK_",
        env_file=".env",
        extra="ignore",
    )

    # Package imported by every generated threshold file.
    ALERTS_PACKAGE: str = "influxdata/influxdb/alerts"
    THRESHOLD_FILE_NAME: str = "threshold.flux"

    # Log parse timings and node counts.
    PARSE_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


settings = Settings()

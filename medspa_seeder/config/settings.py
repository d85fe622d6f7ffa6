from pathlib import Path
from typing import Optional, Union, Dict, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """
    Configuration for Loguru logging sinks.
    """

    level: str = Field(default="INFO", description="The log level")
    console: bool = Field(default=True, description="Show logs in console")
    enable_file: bool = Field(
        default=False, description="Flag to denote persistence of logs"
    )
    filepath: Optional[Path] = Field(
        default="logs/seeder.log", description="Optional file path for logs"
    )
    rotation: str = Field(default="10 MB", description="Roll log after this size")
    retention: str = Field(
        default="7 days", description="Keep logs for this amount of time"
    )
    compression: str = Field(default="zip", description="Compress old logs")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOG_", extra="allow")


class OverpassSettings(BaseSettings):
    """
    Configuration for the Overpass endpoint client.
    """

    endpoints: List[str] = Field(
        default=[
            "https://overpass-api.de/api/interpreter",
            "https://overpass.kumi.systems/api/interpreter",
            "https://overpass.openstreetmap.ru/api/interpreter",
        ],
        description="The Overpass API endpoints, in priority order",
    )
    headers: Dict[str, Any] = Field(
        default={
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "User-Agent": "osm-medspa-seeder/1.0 (+contact@example.org)",
        },
        description="The headers used for making request to Overpass",
    )
    query_timeout: int = Field(
        default=120, description="The timeout declared inside the Overpass query"
    )
    timeout: int = Field(
        default=180, description="The timeout for the request made to Overpass API"
    )
    max_attempts: int = Field(
        default=3, description="The number of attempts per endpoint"
    )
    base_delay: float = Field(
        default=0.7,
        description="Delay unit in seconds, multiplied by the attempt number",
    )
    strict_elements: bool = Field(
        default=False,
        description="Report a payload without an `elements` list instead of treating it as empty",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="OVERPASS_", extra="allow"
    )

    @field_validator("endpoints")
    @classmethod
    def validate_endpoints(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("At least one Overpass endpoint is required")
        return value

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Maximum attempts must be positive")
        return value


class SeederDefaults(BaseSettings):
    """
    Fallback values used when the run input leaves a field out.
    """

    south: float = Field(default=29.10, description="Default bbox south latitude")
    west: float = Field(default=-98.85, description="Default bbox west longitude")
    north: float = Field(default=29.75, description="Default bbox north latitude")
    east: float = Field(default=-98.10, description="Default bbox east longitude")
    keywords: List[str] = Field(
        default=[
            "med spa",
            "medspa",
            "aesthetic",
            "inject",
            "botox",
            "laser",
            "hydrafacial",
        ],
        description="Default name keywords",
    )
    city: str = Field(default="San Antonio", description="Default fallback city")

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SEEDER_", extra="allow"
    )


class StorageSettings(BaseSettings):
    """
    Configuration for the local run storage.
    """

    dir: Union[Path, str] = Field(
        default=Path("storage"), description="The root directory of the run storage"
    )
    dataset_name: str = Field(
        default="dataset", description="File stem of the dataset outputs"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="STORAGE_", extra="allow"
    )

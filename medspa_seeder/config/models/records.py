from __future__ import annotations

import traceback
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

OUTPUT_FIELDS = (
    "name",
    "domain",
    "city",
    "category",
    "source_url",
    "lat",
    "lon",
    "confidence",
    "notes",
)

DEFAULT_HINT = "Open dataset.csv in the storage directory to work with the results as a spreadsheet."


class OutputRecord(BaseModel):
    """
    One normalized point of interest. Field order is the dataset column order.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Trimmed OSM `name` tag")
    domain: str = Field(default="", description="Root domain of the website tag")
    city: str = Field(description="City from address tags or the fallback city")
    category: str = Field(default="", description="spa, clinic, beauty or raw tag")
    source_url: str = Field(description="Link to the element on openstreetmap.org")
    lat: str = Field(default="", description="Latitude with 6 decimals, or empty")
    lon: str = Field(default="", description="Longitude with 6 decimals, or empty")
    confidence: str = Field(description="'1.00', '0.70' or '0.50'")
    notes: str = Field(default="", description="Evidence such as matched keywords")


class RunSummary(BaseModel):
    found: int = Field(description="Records extracted before deduplication")
    deduped: int = Field(description="Records kept after deduplication")
    bbox: Dict[str, float]
    keywords: List[str]
    city: str
    hint: str = Field(default=DEFAULT_HINT)


class ErrorRecord(BaseModel):
    """
    Written to the `ERROR` slot of the key-value store when a run fails.
    """

    message: str
    error_type: str
    stack: str = ""
    context: Optional[Dict[str, Any]] = Field(
        default=None, description="Whatever partial summary existed at failure time"
    )

    @classmethod
    def from_exception(
        cls, exc: BaseException, context: Optional[Dict[str, Any]] = None
    ) -> "ErrorRecord":
        return cls(
            message=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            stack="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
            context=context,
        )


class RunSuccess(BaseModel):
    records: List[OutputRecord]
    summary: RunSummary

    @property
    def success(self) -> bool:
        return True


class RunFailure(BaseModel):
    error: ErrorRecord

    @property
    def success(self) -> bool:
        return False


RunResult = Union[RunSuccess, RunFailure]

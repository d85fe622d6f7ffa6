from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from medspa_seeder.config.settings import SeederDefaults
from medspa_seeder.utils.errors import InvalidConfiguration


def to_number(value: Any, default: float) -> float:
    """
    Coerce a numeric or numeric-string value, falling back to `default`.

    :param value: The raw input value.
    :param default: Returned when the value is absent, empty, boolean, non-numeric or not finite.
    :return: The coerced float.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def clean_keywords(values: Any) -> List[str]:
    """
    Stringify, trim and drop empty keyword entries.
    """
    if not isinstance(values, (list, tuple)):
        return []
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


class BoundingBox(BaseModel):
    """
    A south/west/north/east rectangle in degrees.
    """

    model_config = ConfigDict(frozen=True)

    south: float = Field(description="Southern latitude")
    west: float = Field(description="Western longitude")
    north: float = Field(description="Northern latitude")
    east: float = Field(description="Eastern longitude")

    @field_validator("south", "north")
    @classmethod
    def validate_latitude(cls, value: float) -> float:
        if not -90 <= value <= 90:
            raise ValueError(f"latitude must be within [-90, 90], got {value}")
        return value

    @field_validator("west", "east")
    @classmethod
    def validate_longitude(cls, value: float) -> float:
        if not -180 <= value <= 180:
            raise ValueError(f"longitude must be within [-180, 180], got {value}")
        return value

    def to_overpass(self) -> str:
        """
        Render as the `(south,west,north,east)` filter body used by Overpass QL.
        """
        return f"{self.south},{self.west},{self.north},{self.east}"


class SeederConfig(BaseModel):
    """
    Canonical run configuration, built once by `normalize_input`.
    """

    model_config = ConfigDict(frozen=True)

    bbox: BoundingBox
    keywords: Tuple[str, ...] = Field(min_length=1)
    city: str = Field(min_length=1)

    def echo(self) -> Dict[str, Any]:
        """
        JSON-friendly view used in the run summary.
        """
        return {
            "bbox": self.bbox.model_dump(),
            "keywords": list(self.keywords),
            "city": self.city,
        }


class _InputBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keywords: Any = None
    keyword_list: Any = None
    city: Any = None

    def resolve_keywords(self, defaults: SeederDefaults) -> Tuple[str, ...]:
        explicit = clean_keywords(self.keywords)
        if explicit:
            return tuple(explicit)
        if isinstance(self.keyword_list, str):
            split = clean_keywords(self.keyword_list.split(","))
            if split:
                return tuple(split)
        return tuple(clean_keywords(defaults.keywords))

    def resolve_city(self, defaults: SeederDefaults) -> str:
        city = str(self.city).strip() if self.city is not None else ""
        return city or defaults.city


class NestedInput(_InputBase):
    """
    `{bbox: {south, west, north, east}, keywords: [...], city}`
    """

    kind: Literal["nested"] = "nested"
    bbox: Dict[str, Any]

    def bbox_values(self, defaults: SeederDefaults) -> Dict[str, float]:
        return {
            "south": to_number(self.bbox.get("south"), defaults.south),
            "west": to_number(self.bbox.get("west"), defaults.west),
            "north": to_number(self.bbox.get("north"), defaults.north),
            "east": to_number(self.bbox.get("east"), defaults.east),
        }


class FlatInput(_InputBase):
    """
    `{bbox_south, bbox_west, bbox_north, bbox_east, keyword_list, city}`
    """

    kind: Literal["flat"] = "flat"
    bbox_south: Any = None
    bbox_west: Any = None
    bbox_north: Any = None
    bbox_east: Any = None

    def bbox_values(self, defaults: SeederDefaults) -> Dict[str, float]:
        return {
            "south": to_number(self.bbox_south, defaults.south),
            "west": to_number(self.bbox_west, defaults.west),
            "north": to_number(self.bbox_north, defaults.north),
            "east": to_number(self.bbox_east, defaults.east),
        }


SeederInput = Annotated[Union[NestedInput, FlatInput], Field(discriminator="kind")]

_INPUT_ADAPTER: TypeAdapter = TypeAdapter(SeederInput)


def input_kind(raw: Mapping) -> str:
    """
    Decide which input shape a raw mapping uses: a mapping under `bbox` means nested.
    """
    bbox = raw.get("bbox")
    return "nested" if isinstance(bbox, Mapping) and bbox else "flat"


def normalize_input(
    raw: Optional[Mapping], defaults: Optional[SeederDefaults] = None
) -> SeederConfig:
    """
    Reconcile either accepted input shape into one `SeederConfig`.

    :param raw: The loosely typed run input. `None` is treated as an empty input.
    :param defaults: Fallback values; read from the environment when omitted.
    :return: The validated, immutable configuration.
    :raises InvalidConfiguration: If the input is not a mapping or a bbox coordinate is out of range.
    """
    defaults = defaults or SeederDefaults()
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise InvalidConfiguration(
            f"Run input must be a mapping, got {type(raw).__name__}"
        )

    try:
        parsed = _INPUT_ADAPTER.validate_python({**raw, "kind": input_kind(raw)})
    except ValidationError as e:
        raise InvalidConfiguration(f"Unreadable run input: {e}") from e

    try:
        bbox = BoundingBox(**parsed.bbox_values(defaults))
    except ValidationError as e:
        problems = "; ".join(
            f"{err['loc'][0]}: {err['msg']}" for err in e.errors(include_url=False)
        )
        raise InvalidConfiguration(f"Invalid bbox coordinates ({problems})") from e

    try:
        return SeederConfig(
            bbox=bbox,
            keywords=parsed.resolve_keywords(defaults),
            city=parsed.resolve_city(defaults),
        )
    except ValidationError as e:
        raise InvalidConfiguration(f"Incomplete run configuration: {e}") from e

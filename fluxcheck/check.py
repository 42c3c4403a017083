"""
Check configuration models.

Checks are stored as JSON documents tagged with a ``"type"`` discriminator.
``marshal_check`` / ``unmarshal_check`` are the only places that read or
write the tag; the models themselves only know their own fields.
"""
import json
import math
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidConfigError


class CheckLevel(IntEnum):
    """Severity of a check result, ordered from least to most urgent."""
    UNKNOWN = 0
    OK = 1
    INFO = 2
    WARN = 3
    CRIT = 4

    @classmethod
    def parse(cls, value: Union[str, int, "CheckLevel"]) -> "CheckLevel":
        # bool is an int subclass; true/false are not levels
        if isinstance(value, bool):
            raise ValueError(f"unknown check level {value!r}")
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown check level {value!r}")
        return cls(value)


class BoundKind(str, Enum):
    GREATER = "greater"
    LESSER = "lesser"
    RANGE = "range"


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Tag(_Model):
    key: str
    value: str

    def valid(self) -> None:
        if not self.key:
            raise InvalidConfigError("tag must contain a key")
        if not self.value:
            raise InvalidConfigError(f"tag {self.key!r} must contain a value")


class Query(_Model):
    text: str = ""


class ThresholdConfig(_Model):
    """One severity band of a threshold check."""
    # If true, only alert if all values meet threshold.
    all_values: bool = False
    level: CheckLevel = CheckLevel.UNKNOWN
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> CheckLevel:
        return CheckLevel.parse(value)

    @field_serializer("level")
    def _serialize_level(self, level: CheckLevel) -> str:
        return level.name

    @property
    def kind(self) -> Optional[BoundKind]:
        if self.lower_bound is not None and self.upper_bound is not None:
            return BoundKind.RANGE
        if self.lower_bound is not None:
            return BoundKind.GREATER
        if self.upper_bound is not None:
            return BoundKind.LESSER
        return None

    def valid(self) -> None:
        if self.lower_bound is None and self.upper_bound is None:
            raise InvalidConfigError("threshold must have at least one lowerBound or upperBound value")
        for bound in (self.lower_bound, self.upper_bound):
            if bound is not None and not math.isfinite(bound):
                raise InvalidConfigError(f"threshold bound must be a finite number, got {bound}")


class Base(_Model):
    """Fields shared by every check kind."""
    id: str = ""
    name: str = ""
    description: str = ""
    query: Query = Field(default_factory=Query)
    status_message_template: str = ""
    tags: List[Tag] = Field(default_factory=list)

    check_type: ClassVar[str] = ""

    def valid(self) -> None:
        if not self.id:
            raise InvalidConfigError("Check ID is invalid")
        if not self.name:
            raise InvalidConfigError("Check Name can't be empty")
        for tag in self.tags:
            tag.valid()


class Threshold(Base):
    """Threshold check: alerts when ``_value`` crosses configured bounds."""
    thresholds: List[ThresholdConfig] = Field(default_factory=list)

    check_type: ClassVar[str] = "threshold"

    def valid(self) -> None:
        super().valid()
        for cfg in self.thresholds:
            cfg.valid()


# type discriminator -> model
CHECK_TYPES: Dict[str, Type[Base]] = {
    Threshold.check_type: Threshold,
}


def unmarshal_check(data: Union[str, bytes, Dict[str, Any]]) -> Base:
    """Decode a stored check document into the model named by its ``type``."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise InvalidConfigError(f"check is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise InvalidConfigError("check must be a JSON object")

    fields = dict(data)
    check_type = fields.pop("type", None)
    if check_type is None:
        raise InvalidConfigError("check is missing its type")
    if not isinstance(check_type, str):
        raise InvalidConfigError(f"invalid check type {check_type!r}")
    model = CHECK_TYPES.get(check_type)
    if model is None:
        raise InvalidConfigError(f"invalid check type {check_type!r}")

    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise InvalidConfigError(f"invalid {check_type} check: {e}", data=e.errors())


def marshal_check(check: Base) -> Dict[str, Any]:
    """Encode a check as a JSON-ready dict carrying its ``type``."""
    data = check.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["type"] = check.check_type
    return data

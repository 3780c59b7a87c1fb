"""Pydantic schemas for diary events: one frozen variant per event type, discriminated by `type`."""

import enum
import re
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from diary.core.errors import InvalidInputError


class EventType(str, enum.Enum):
    water = "water"
    exercise = "exercise"
    urinate = "urinate"
    food = "food"
    coffee = "coffee"
    glicemia = "glicemia"
    sol = "sol"
    sweet = "sweet"
    alcool = "alcool"
    isotonic = "isotonic"
    wake = "wake"
    sleep_start = "sleep_start"
    sleep_end = "sleep_end"


# Only these types move a cycle between DAY and NIGHT
BOUNDARY_TYPES = frozenset({EventType.sleep_start.value, EventType.sleep_end.value})
# Types that get a weather reading attached when written
WEATHER_TYPES = frozenset({EventType.sleep_start.value, EventType.sleep_end.value, EventType.wake.value})
# Optional per-variant columns in the events table
VARIANT_FIELDS = ("amount", "subtype", "note", "level", "duration")

_NON_DIGITS = re.compile(r"[^\d]")


def clean_digits(value: Any) -> Any:
    """Keep only the digits of a typed number ("120 mg/dL" -> 120). Non-strings pass through."""
    if isinstance(value, str):
        digits = _NON_DIGITS.sub("", value.strip())
        if not digits:
            raise ValueError("expected a number")
        return int(digits)
    return value


class WeatherReading(BaseModel):
    """Hourly sample attached to a sleep boundary or wake event."""

    model_config = ConfigDict(frozen=True)

    temp: float
    hum: float
    lat: float | None = None
    lon: float | None = None


class EventBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    ts: int = Field(ge=0, description="Epoch milliseconds")
    date_key: str | None = Field(default=None, validation_alias=AliasChoices("date_key", "dateKey"))
    weather: WeatherReading | None = None


class WaterEvent(EventBase):
    type: Literal["water"] = "water"
    amount: int = Field(gt=0, description="ml")
    subtype: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def clean_amount(cls, v: Any) -> Any:
        return clean_digits(v)


class IsotonicEvent(EventBase):
    type: Literal["isotonic"] = "isotonic"
    amount: int | None = Field(default=None, ge=100, description="ml")
    subtype: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def clean_amount(cls, v: Any) -> Any:
        return clean_digits(v)


class GlicemiaEvent(EventBase):
    type: Literal["glicemia"] = "glicemia"
    # 2-3 digits, mg/dL
    level: int | None = Field(default=None, ge=10, le=999)

    @field_validator("level", mode="before")
    @classmethod
    def clean_level(cls, v: Any) -> Any:
        return clean_digits(v)


class SolEvent(EventBase):
    type: Literal["sol"] = "sol"
    duration: int | None = Field(default=None, ge=10, description="minutes")

    @field_validator("duration", mode="before")
    @classmethod
    def clean_duration(cls, v: Any) -> Any:
        return clean_digits(v)


class FoodEvent(EventBase):
    type: Literal["food"] = "food"
    note: str = ""


class SweetEvent(EventBase):
    type: Literal["sweet"] = "sweet"
    note: str = ""


class AlcoolEvent(EventBase):
    type: Literal["alcool"] = "alcool"
    note: str = ""


class ExerciseEvent(EventBase):
    type: Literal["exercise"] = "exercise"


class UrinateEvent(EventBase):
    type: Literal["urinate"] = "urinate"


class CoffeeEvent(EventBase):
    type: Literal["coffee"] = "coffee"


class WakeEvent(EventBase):
    """Night-time awakening. Counted in NIGHT stats; does not close the cycle."""

    type: Literal["wake"] = "wake"


class SleepStartEvent(EventBase):
    type: Literal["sleep_start"] = "sleep_start"


class SleepEndEvent(EventBase):
    type: Literal["sleep_end"] = "sleep_end"


EventRecord = Annotated[
    Union[
        WaterEvent,
        IsotonicEvent,
        GlicemiaEvent,
        SolEvent,
        FoodEvent,
        SweetEvent,
        AlcoolEvent,
        ExerciseEvent,
        UrinateEvent,
        CoffeeEvent,
        WakeEvent,
        SleepStartEvent,
        SleepEndEvent,
    ],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[EventRecord] = TypeAdapter(EventRecord)


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p is not None)
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_event(data: dict[str, Any]) -> EventRecord:
    """Validate a raw dict into the matching event variant. Raises InvalidInputError."""
    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidInputError(_describe_errors(e)) from e


def event_to_dict(event: EventRecord) -> dict[str, Any]:
    """JSON-ready dict with only the fields the variant carries."""
    return event.model_dump(mode="json", exclude_none=True)

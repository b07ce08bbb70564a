"""Robot metrics schemas (gait cycles, distance walked, time moving, ...)."""

from collections.abc import Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import AwareDatetime, Field, TypeAdapter, model_validator

from .messages import MessageBase, select_variant


class ParameterKind(str, Enum):
    """Value variants of a Parameter, named by their wire field."""

    INT = "int_value"
    FLOAT = "float_value"
    TIMESTAMP = "timestamp"
    DURATION = "duration"
    STRING = "string_value"
    BOOL = "bool_value"


_VALUE_ADAPTERS: dict[ParameterKind, TypeAdapter[Any]] = {
    ParameterKind.INT: TypeAdapter(int),
    ParameterKind.FLOAT: TypeAdapter(float),
    ParameterKind.TIMESTAMP: TypeAdapter(AwareDatetime),
    ParameterKind.DURATION: TypeAdapter(timedelta),
    ParameterKind.STRING: TypeAdapter(str),
    ParameterKind.BOOL: TypeAdapter(bool),
}

_PARAMETER_VARIANTS = {kind.value: kind for kind in ParameterKind}


def _infer_kind(value: Any) -> ParameterKind:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ParameterKind.BOOL
    if isinstance(value, int):
        return ParameterKind.INT
    if isinstance(value, float):
        return ParameterKind.FLOAT
    if isinstance(value, datetime):
        return ParameterKind.TIMESTAMP
    if isinstance(value, timedelta):
        return ParameterKind.DURATION
    if isinstance(value, str):
        return ParameterKind.STRING
    raise ValueError(f"unsupported parameter value type: {type(value).__name__}")


class Parameter(MessageBase):
    """A named metric value.

    Exactly one value variant is set. Accepts the wire form
    (``Parameter(label="distance", float_value=12.5)``), an explicit
    ``kind``/``value`` pair, or a bare ``value`` whose kind is inferred.

    Attributes:
        label: Metric name
        units: Units of the value
        notes: Free-form description
        kind: Which value variant is set
        value: The value
    """

    label: str
    units: str = ""
    notes: str = ""
    kind: ParameterKind
    value: bool | int | float | str | datetime | timedelta

    @model_validator(mode="before")
    @classmethod
    def _one_value(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and data.get("kind") is not None:
            kind = ParameterKind(data["kind"])
            data = dict(data)
            data["value"] = _VALUE_ADAPTERS[kind].validate_python(data.get("value"))
            return data

        data, _, kind = select_variant(data, _PARAMETER_VARIANTS, "value", "Parameter")
        if not isinstance(data, dict):
            return data
        if kind is None:
            kind = _infer_kind(data["value"])
        data["kind"] = kind
        data["value"] = _VALUE_ADAPTERS[kind].validate_python(data["value"])
        return data


class RobotMetrics(MessageBase):
    """Key tracked robot metrics.

    Attributes:
        timestamp: Robot clock time of the metrics
        metrics: Metrics in producer order
    """

    timestamp: AwareDatetime | None = None
    metrics: tuple[Parameter, ...] = Field(default_factory=tuple)

    def get(self, label: str) -> Parameter | None:
        """Get a metric by label."""
        for metric in self.metrics:
            if metric.label == label:
                return metric
        return None

from typing import Annotated, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, RootModel


def _number(value: float) -> Union[int, float]:
    return int(value) if value.is_integer() else value


def _null_as_empty(value):
    return [] if value is None else value


# JSON numbers: integral values encode without a fractional part.
Number = Annotated[float, PlainSerializer(_number)]


class UpstreamModel(BaseModel):
    """
    Base for every upstream payload shape.

    The upstream API is not ours: fields we do not model are kept
    as-is so that re-encoding does not silently drop them.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# =========================
# Labels
# =========================

class Label(BaseModel):
    name: str
    value: str


class LabelSet(RootModel):
    """
    Ordered (name, value) pairs.

    Accepts both wire forms, a list of {"name", "value"} objects or a
    JSON object of name -> value, and encodes back in the same form.
    """

    root: Union[Dict[str, str], List[Label]]

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        if isinstance(self.root, dict):
            return iter(self.root.items())
        return ((lbl.name, lbl.value) for lbl in self.root)

    def __len__(self) -> int:
        return len(self.root)

    def has(self, name: str, value: str) -> bool:
        return any(n == name and v == value for n, v in self)


def _empty_labels() -> LabelSet:
    return LabelSet([])


# =========================
# Alerts
# =========================

class Alert(UpstreamModel):
    labels: LabelSet = Field(default_factory=_empty_labels)
    annotations: LabelSet = Field(default_factory=_empty_labels)
    state: str
    # Kept verbatim: upstream timestamps carry nanosecond precision.
    active_at: Optional[str] = Field(default=None, alias="activeAt")
    value: str


# =========================
# Rules
# =========================

class AlertingRule(UpstreamModel):
    name: str
    query: str
    duration: Number
    labels: LabelSet = Field(default_factory=_empty_labels)
    annotations: LabelSet = Field(default_factory=_empty_labels)
    alerts: List[Alert] = Field(default_factory=list)
    health: str
    last_error: Optional[str] = Field(default=None, alias="lastError")
    type: Literal["alerting"]


class RecordingRule(UpstreamModel):
    name: str
    query: str
    labels: Optional[LabelSet] = None
    health: str
    last_error: Optional[str] = Field(default=None, alias="lastError")
    type: Literal["recording"]


class Rule(RootModel):
    """
    Either an alerting or a recording rule.

    Decoding reads the "type" discriminator first and then validates the
    whole object against the matching variant only; any other value is
    rejected. Encoding emits the active variant alone.
    """

    root: Annotated[Union[AlertingRule, RecordingRule], Field(discriminator="type")]

    @property
    def kind(self) -> str:
        return self.root.type

    def labels(self) -> LabelSet:
        if isinstance(self.root, AlertingRule):
            return self.root.labels
        return self.root.labels if self.root.labels is not None else _empty_labels()


class RuleGroup(UpstreamModel):
    name: str
    file: str
    rules: Annotated[List[Rule], BeforeValidator(_null_as_empty)] = Field(default_factory=list)
    interval: Number


# =========================
# Payloads (envelope "data")
# =========================

class RulesData(UpstreamModel):
    groups: Annotated[List[RuleGroup], BeforeValidator(_null_as_empty)] = Field(default_factory=list)


class AlertsData(UpstreamModel):
    alerts: Annotated[List[Alert], BeforeValidator(_null_as_empty)] = Field(default_factory=list)

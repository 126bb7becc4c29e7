"""Data models and types used across the backend.

Signals are produced by the scraper, AuditReport is the validated AI
output, AnalysisResult is what the API hands to presentation code.
All models are frozen and serialize with the camelCase keys the
frontend and the AI prompt use.
"""

import math
import re
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

CATEGORY_NAMES = (
    "E-Commerce Fundamentals",
    "Performance & Speed",
    "SEO Visibility",
    "Conversion Optimization",
)
METRIC_TITLES = (
    "AI Discovery & Visibility",
    "Semantic Structure",
    "Conversational Readiness",
    "AI Technical Hygiene",
)
LABELS = ("Excellent", "Good", "Fair", "Poor")
ITEM_STATUSES = ("pass", "fail", "warning")

_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def _coerce_score(value: object) -> object:
    """Accept 82, 82.4, "82", "82/100" and "82%" as integer scores."""
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return value
        value = float(match.group(1))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"score must be a finite number, got {value}")
        return round(value)
    return value


def _canonical(choices: tuple[str, ...]):
    lookup = {choice.lower(): choice for choice in choices}

    def match(value: object) -> object:
        if isinstance(value, str):
            return lookup.get(value.strip().lower(), value)
        return value

    return match


def _opaque_score(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:g}"
    return value


def label_for_score(score: int) -> str:
    if score >= 85:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Poor"


Score = Annotated[int, BeforeValidator(_coerce_score), Field(ge=0, le=100)]
CategoryName = Annotated[Literal[CATEGORY_NAMES], BeforeValidator(_canonical(CATEGORY_NAMES))]
MetricTitle = Annotated[Literal[METRIC_TITLES], BeforeValidator(_canonical(METRIC_TITLES))]
Label = Annotated[Literal[LABELS], BeforeValidator(_canonical(LABELS))]
ItemStatus = Annotated[Literal[ITEM_STATUSES], BeforeValidator(_canonical(ITEM_STATUSES))]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Signals(_Frozen):
    """Structural facts extracted from a page's markup."""

    title: str = ""
    description: str = ""
    h1: list[str] = Field(default_factory=list)
    h2: list[str] = Field(default_factory=list)
    og_image: str = Field(default="", alias="ogImage")
    favicon: str = ""
    links: list[str] = Field(default_factory=list)
    meta_tags: dict[str, str] = Field(default_factory=dict, alias="metaTags")
    scripts: list[str] = Field(default_factory=list)


class CheckItem(_Frozen):
    label: str = ""
    status: ItemStatus = "warning"
    message: str = ""


class Category(_Frozen):
    name: CategoryName
    score: Score = 0
    details: str = ""
    items: list[CheckItem] = Field(default_factory=list)


class MissingItem(_Frozen):
    label: str = ""
    description: str = ""
    fix: str = ""


class Metric(_Frozen):
    """One benchmark metric. The score is kept as the model wrote it, e.g. "75/100"."""

    title: MetricTitle
    score: Annotated[str, BeforeValidator(_opaque_score)] = ""
    status: str = ""
    implemented_items: list[str] = Field(default_factory=list, alias="implementedItems")
    missing_items: list[MissingItem] = Field(default_factory=list, alias="missingItems")


def _check_unique(values: list[str], kind: str) -> None:
    if len(values) > 4:
        raise ValueError(f"expected at most 4 {kind}, got {len(values)}")
    if len(set(values)) != len(values):
        raise ValueError(f"duplicate {kind}: {values}")


class Benchmark(_Frozen):
    overall_score: Score | None = Field(default=None, alias="overallScore")
    verdict: str = ""
    metrics: list[Metric] = Field(default_factory=list)

    @field_validator("metrics")
    @classmethod
    def unique_titles(cls, value: list[Metric]) -> list[Metric]:
        _check_unique([m.title for m in value], "benchmark metrics")
        return value


class AuditReport(_Frozen):
    """Validated AI assessment. Missing fields fall back to empty defaults."""

    score: Score = 0
    label: Label
    summary: str = ""
    categories: list[Category] = Field(default_factory=list)
    benchmark: Benchmark = Field(default_factory=Benchmark)
    recommendations: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fill_label(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("label"):
            try:
                score = _coerce_score(data.get("score", 0))
            except ValueError:
                score = 0
            data = {**data, "label": label_for_score(score if isinstance(score, int) else 0)}
        return data

    @field_validator("categories")
    @classmethod
    def unique_names(cls, value: list[Category]) -> list[Category]:
        _check_unique([c.name for c in value], "categories")
        return value


class AnalysisResult(_Frozen):
    """Everything one audit produced, plus benchmark fields lifted out of the report."""

    url: str
    signals: Signals = Field(alias="scrapedData")
    report: AuditReport = Field(alias="analysis")
    benchmark_metrics: list[Metric] = Field(default_factory=list, alias="parsedReferenceMetrics")
    benchmark_verdict: str = Field(default="", alias="referenceVerdict")
    overall_benchmark_score: int | None = Field(default=None, alias="overallReferenceScore")

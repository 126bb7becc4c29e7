"""Audit pipeline: scrape -> prompt -> model fallback -> parse -> result.

Failures from any stage propagate unchanged; nothing here retries.
"""

import logging
import re
from typing import Sequence

import ai_service
import reply_parser
import scraper
from models import AnalysisResult, AuditReport, Metric

log = logging.getLogger("commerce-audit")

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def normalize_url(url: str) -> str:
    """Prefix https:// when the URL carries no scheme."""
    target = (url or "").strip()
    if not _SCHEME.match(target):
        target = f"https://{target}"
    return target


def benchmark_projection(report: AuditReport) -> tuple[list[Metric], str, int | None]:
    """Benchmark metrics, verdict and overall score; the score stays None when absent."""
    benchmark = report.benchmark
    return list(benchmark.metrics), benchmark.verdict, benchmark.overall_score


def analyze(url: str, variants: Sequence[ai_service.Variant] | None = None) -> AnalysisResult:
    target_url = normalize_url(url)
    log.info("Analyzing: %s", target_url)

    signals = scraper.extract(target_url)
    log.info(
        "Scraped %s: %d h1, %d h2, %d links, %d meta tags",
        target_url,
        len(signals.h1),
        len(signals.h2),
        len(signals.links),
        len(signals.meta_tags),
    )

    prompt = ai_service.build_prompt(target_url, signals)
    raw_text = ai_service.invoke(prompt, variants if variants is not None else ai_service.default_variants())
    report = reply_parser.normalize(raw_text)

    metrics, verdict, overall = benchmark_projection(report)
    log.info("Audit complete for %s: score=%s benchmark=%s", target_url, report.score, overall)

    return AnalysisResult(
        url=target_url,
        signals=signals,
        report=report,
        benchmark_metrics=metrics,
        benchmark_verdict=verdict,
        overall_benchmark_score=overall,
    )

"""
Claude API key must be defined in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

The app loads environment variables automatically using python-dotenv.
Model variants are tried in order; the first non-empty reply wins.
"""

from dotenv import load_dotenv
import json
import logging
import os
from pathlib import Path
from typing import Protocol, Sequence

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

from anthropic import Anthropic

from errors import AllVariantsExhausted
from models import CATEGORY_NAMES, METRIC_TITLES, Signals

log = logging.getLogger("commerce-audit")

DEFAULT_MODEL_ORDER = [
    "claude-sonnet-4-5",
    "claude-3-7-sonnet-latest",
    "claude-3-5-haiku-latest",
    "claude-3-haiku-20240307",
]


def _dedupe_models(values: list[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for value in values:
        model = value.strip()
        if not model or model in seen:
            continue
        out.append(model)
        seen.add(model)
    return out


_fallbacks_env = os.getenv("CLAUDE_MODEL_FALLBACKS", "").strip()
MODEL_CANDIDATES = _dedupe_models(
    [os.getenv("CLAUDE_MODEL", "")]
    + (_fallbacks_env.split(",") if _fallbacks_env else DEFAULT_MODEL_ORDER)
)
TEMPERATURE = float(os.getenv("CLAUDE_TEMPERATURE", "0.2"))
MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "4000"))
TIMEOUT_SECONDS = float(os.getenv("CLAUDE_TIMEOUT_SECONDS", "60"))

SYSTEM_MESSAGE = """You are a senior e-commerce auditor who grades storefronts against AI-first commerce standards.
Return ONLY valid raw JSON that matches the schema exactly.
Do not include markdown, code fences, or text outside JSON."""

USER_TEMPLATE = """Analyze the following website data for a product/commerce website:
URL: {url}
Title: {title}
Description: {description}
H1s: {h1}
H2s: {h2}
Meta Tags: {meta_tags}

Provide a detailed report in JSON format with the following structure:
{{
  "score": number (0-100),
  "label": "Excellent" | "Good" | "Fair" | "Poor",
  "summary": string (high-level assessment),
  "categories": [
    {{
      "name": {category_union},
      "score": number (0-100),
      "details": string,
      "items": [
        {{ "label": string, "status": "pass" | "fail" | "warning", "message": string }}
      ]
    }}
  ],
  "benchmark": {{
    "overallScore": number (0-100 score against AI-first commerce standards),
    "verdict": string (a blunt, honest assessment of how this site compares to elite AI-ready storefronts),
    "metrics": [
      {{
        "title": {metric_union},
        "score": string (e.g. "75/100"),
        "status": string (e.g. "Competitive", "Laggard", "Elite"),
        "implementedItems": [string],
        "missingItems": [
          {{ "label": string, "description": string, "fix": string }}
        ]
      }}
    ]
  }},
  "recommendations": [string]
}}

IMPORTANT CONSTRAINTS:
1. You MUST return exactly 4 categories with the exact names: {category_list}.
2. You MUST return exactly 4 benchmark metrics with the exact titles: {metric_list}.

SCORING GUIDELINES:
- Assess the site against modern AI-ready commerce standards (structured data, semantic clarity, bot accessibility).
- Be critical but constructive.
- The benchmark section should move beyond basic SEO to evaluate if the site is ready for shopper agents and LLM discovery.

Return ONLY the JSON."""


def build_prompt(url: str, signals: Signals) -> str:
    def _union(values: Sequence[str]) -> str:
        return " | ".join(f'"{v}"' for v in values)

    def _listing(values: Sequence[str]) -> str:
        return ", ".join(f'"{v}"' for v in values)

    return USER_TEMPLATE.format(
        url=url,
        title=signals.title,
        description=signals.description,
        h1=", ".join(signals.h1),
        h2=", ".join(signals.h2),
        meta_tags=json.dumps(signals.meta_tags, ensure_ascii=False),
        category_union=_union(CATEGORY_NAMES),
        metric_union=_union(METRIC_TITLES),
        category_list=_listing(CATEGORY_NAMES),
        metric_list=_listing(METRIC_TITLES),
    )


class Variant(Protocol):
    """A named backend configuration that turns a prompt into text."""

    name: str

    def generate(self, prompt: str) -> str: ...


class EmptyReply(Exception):
    """A variant answered, but with no text."""


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


class ClaudeVariant:
    """One Claude model, called once per generate() with no inner retry."""

    def __init__(self, model: str, client: Anthropic | None = None) -> None:
        self.name = model
        self._client = client

    def _get_client(self) -> Anthropic:
        if self._client is None:
            self._client = Anthropic(api_key=os.getenv("ANTHROPIC_API_KEY"), timeout=TIMEOUT_SECONDS, max_retries=0)
        return self._client

    def generate(self, prompt: str) -> str:
        response = self._get_client().messages.create(
            model=self.name,
            max_tokens=MAX_TOKENS,
            system=SYSTEM_MESSAGE,
            messages=[{"role": "user", "content": prompt}],
            temperature=TEMPERATURE,
        )
        if getattr(response, "stop_reason", None) == "max_tokens":
            log.warning("Claude output hit max_tokens for model=%s", self.name)
        return _extract_response_text(response)

    def __repr__(self) -> str:
        return f"ClaudeVariant({self.name!r})"


def default_variants(client: Anthropic | None = None) -> list[ClaudeVariant]:
    """Variants for MODEL_CANDIDATES, sharing one client when given."""
    return [ClaudeVariant(model, client=client) for model in MODEL_CANDIDATES]


def invoke(prompt: str, variants: Sequence[Variant]) -> str:
    """
    Try each variant in order and return the first non-empty reply.
    Raises AllVariantsExhausted carrying the last error once every
    variant has failed.
    """
    last_error: Exception | None = None
    last_variant: str | None = None

    for variant in variants:
        last_variant = variant.name
        log.info("Attempting analysis with %s", variant.name)
        try:
            text = variant.generate(prompt)
        except Exception as e:
            log.warning("Model %s failed: %s", variant.name, e)
            last_error = e
            continue

        if not text or not text.strip():
            log.warning("Model %s returned an empty reply", variant.name)
            last_error = EmptyReply(f"Empty response from {variant.name}.")
            continue

        log.info("Analysis successful with %s", variant.name)
        log.debug("Raw reply from %s:\n%s", variant.name, text)
        return text

    raise AllVariantsExhausted(last_error, variant=last_variant)

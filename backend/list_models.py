"""List the Claude models the configured API key can reach.

Run as `commerce-audit-models` (or `python list_models.py`) to check
which entries of the model fallback order are actually available.
"""

import logging
import os
import sys

from anthropic import Anthropic, AnthropicError

from ai_service import MODEL_CANDIDATES

log = logging.getLogger("commerce-audit")


def available_models(client: Anthropic | None = None) -> list[str]:
    if client is None:
        client = Anthropic(api_key=os.getenv("ANTHROPIC_API_KEY"))
    return [model.id for model in client.models.list()]


def check_candidates(available: list[str]) -> dict[str, bool]:
    known = set(available)
    return {model: model in known for model in MODEL_CANDIDATES}


def main() -> int:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), format="%(message)s")

    if not os.getenv("ANTHROPIC_API_KEY"):
        log.error("ANTHROPIC_API_KEY not found in environment.")
        return 1

    try:
        models = available_models()
    except AnthropicError as e:
        log.error("Error listing models: %s", e)
        return 1

    log.info("Available models:")
    for model in models:
        log.info("- %s", model)

    for model, ok in check_candidates(models).items():
        if ok:
            log.info("Fallback candidate %s is available", model)
        else:
            log.warning("Fallback candidate %s is NOT available", model)
    return 0


if __name__ == "__main__":
    sys.exit(main())

# app/textgen.py
"""Optional text generation for listing descriptions and review summaries.

Backed by the Gemini REST API. Without an API key a placeholder text is
returned so nothing else depends on the service being configured.
"""
from typing import Iterable, List

import requests

from . import config
from .errors import InternalError
from .utils import logger, retry

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
MISSING_KEY_TEXT = "(AI key missing. Provide an API key to enable AI features.)"


@retry((requests.ConnectionError, requests.Timeout), tries=3, delay=1, backoff=2)
def _post(url, payload, api_key):
    r = requests.post(url, params={"key": api_key}, json=payload, timeout=30)
    r.raise_for_status()
    return r.json()


def generate(prompt_parts: List[str]) -> str:
    if not config.GEMINI_API_KEY:
        return MISSING_KEY_TEXT
    payload = {"contents": [{"role": "user", "parts": [{"text": t} for t in prompt_parts]}]}
    try:
        data = _post(GEMINI_ENDPOINT.format(model=config.GEMINI_MODEL), payload, config.GEMINI_API_KEY)
    except requests.RequestException as e:
        logger.exception("Text generation failed")
        raise InternalError("Text generation failed") from e
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"].strip()
    except (KeyError, IndexError, TypeError):
        logger.warning("Unexpected text generation response: %s", str(data)[:200])
        return ""


def generate_description(title: str, category: str, keywords: str = None) -> str:
    return generate([
        "Create a concise, friendly listing description for Fixify+.",
        f"Title: {title}",
        f"Category: {category}",
        f"Details/keywords: {keywords or 'N/A'}",
        "Constraints: 60-120 words, simple English, include contact via phone, safety and community tone.",
    ])


def summarize_reviews(reviews: Iterable[str]) -> str:
    lines = [f"- {r}" for r in reviews if r]
    return generate([
        "Summarize these user reviews for a marketplace listing in 2-3 sentences.",
        "\n".join(lines) or "No reviews.",
    ])

from __future__ import annotations

import json
import logging
import re

from groq import Groq

from ..inventory.models import Car
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a car buying assistant for an online car marketplace. "
    "Given a shopper's request, optional personality traits and a list of "
    "candidate cars, order the cars from most to least suitable.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"ranking": [<car_id>, <car_id>, ...]}\n'
    "Include only ids from the provided list."
)


def _build_user_message(
    query: str | None,
    traits: list[str],
    candidates: list[Car],
) -> str:
    lines = ["## Shopper"]
    if query:
        lines.append(f"- Request: {query}")
    for trait in traits:
        lines.append(f"- Trait: {trait}")

    lines.append("\n## Candidate Cars")
    lines.append("| ID | Make | Model | Year | Price | Body | Fuel | Features |")
    lines.append("|---|---|---|---|---|---|---|---|")
    for c in candidates:
        lines.append(
            f"| {c.id} | {c.make} | {c.model} | {c.year} | {c.price} "
            f"| {c.body_type or '?'} | {c.fuel_type or '?'} | {', '.join(c.features)} |"
        )

    return "\n".join(lines)


def parse_ranking(content: str) -> list[int]:
    """Pull an ordered list of car ids out of a model reply.

    Accepts the requested JSON shape and, failing that, a bare
    comma-separated id list.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = re.search(r"\d+(?:\s*,\s*\d+)*", content)
        return [int(x) for x in re.findall(r"\d+", match.group(0))] if match else []

    ranking = parsed.get("ranking", []) if isinstance(parsed, dict) else parsed
    ids: list[int] = []
    for item in ranking if isinstance(ranking, list) else []:
        try:
            ids.append(int(item))
        except (TypeError, ValueError):
            continue
    return ids


def rank_cars(
    query: str | None,
    traits: list[str],
    candidates: list[Car],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[int]:
    """
    Ask Groq to order *candidates* for the shopper.

    Returns car ids best-first, restricted to the candidates given.
    Returns an empty list on any failure (timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return []

    if not candidates or not (query or traits):
        return []

    candidates = candidates[:config.max_candidates]
    known = {c.id for c in candidates}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(query, traits, candidates),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=0.2,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        ranking = parse_ranking(content)

    except Exception:
        logger.warning("Groq LLM call failed, keeping filtered order", exc_info=True)
        return []

    ordered: list[int] = []
    for car_id in ranking:
        if car_id in known and car_id not in ordered:
            ordered.append(car_id)
    return ordered

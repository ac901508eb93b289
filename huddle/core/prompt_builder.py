"""Advice prompt rendering.

Section order is fixed: instructions, player data, real-time updates, user
context, then the user's question.
"""

from __future__ import annotations

import json
from typing import Iterable

from huddle.core.schemas_players import ContextItem

INSTRUCTIONS = """You are an expert fantasy football advisor. Use the provided player data and real-time context to give specific, actionable advice.

IMPORTANT INSTRUCTIONS:
- Prioritize players on the user's roster (is_owned) for start/sit and action recommendations
- Consider injury status and practice participation
- Factor in depth chart position (starters vs backups)
- Give specific start/sit recommendations
- Explain your reasoning with current context"""

NO_DATA_NOTICE = (
    "No matching player data was found for this question. "
    "Give general fantasy football advice and begin your answer with "
    '"General advice:" so the user knows it is not based on their players.'
)

NO_UPDATES_NOTICE = "No real-time updates for these players."

NO_ROSTER_NOTE = "No roster data available"


def describe_roster(owned_ids: Iterable[str]) -> str:
    """Render the user-context note for the prompt."""
    count = len(set(owned_ids))
    if count == 0:
        return NO_ROSTER_NOTE
    return f"Your roster ({count} players): Focus on these players for start/sit decisions."


def serialize_items(items: list[ContextItem]) -> str:
    return json.dumps([item.model_dump(mode="json") for item in items], indent=2)


def build_advice_prompt(
    query: str,
    items: list[ContextItem],
    summary_facts: list[str],
    roster_note: str,
) -> str:
    """
    Render the full advice prompt.

    Args:
        query: The user's question, included verbatim
        items: Assembled context items, already ranked
        summary_facts: Derived one-line facts
        roster_note: Output of describe_roster()

    Returns:
        Prompt text
    """
    player_data = serialize_items(items) if items else NO_DATA_NOTICE
    updates = "\n".join(summary_facts) if summary_facts else NO_UPDATES_NOTICE

    sections = [
        INSTRUCTIONS,
        f"Player Data (Stable Identity + Real-Time Status):\n{player_data}",
        f"Current Real-Time Updates:\n{updates}",
        f"User Context:\n{roster_note}",
        f"User Question: {query}",
    ]
    return "\n\n".join(sections)

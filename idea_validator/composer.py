"""Merge the market research with the generated fragments."""

from __future__ import annotations

from typing import Any, Dict, Iterable

from pydantic import BaseModel

from .schemas import MarketResearch


def compose(base: MarketResearch, fragments: Iterable[BaseModel]) -> Dict[str, Any]:
    """Return the base result with every fragment's fields added.

    Fragments are applied in the order given, so on a key collision the
    later fragment wins over earlier ones and over the base result.
    """

    reply = base.to_payload()
    for fragment in fragments:
        reply.update(fragment.model_dump())
    return reply

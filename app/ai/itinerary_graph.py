from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from app.ai.itinerary_parser import parse_itinerary
from app.ai.openai_client import ChatGateway
from app.ai.prompts import DEFAULT_CURRENCY, SYSTEM_PROMPT, build_itinerary_prompt
from app.api.models.schemas import GenerateItineraryRequest, GeneratedItinerary

logger = logging.getLogger(__name__)


class ItineraryState(TypedDict):
    request: GenerateItineraryRequest
    currency: str
    prompt: str
    content: str
    itinerary: Optional[GeneratedItinerary]


def build_itinerary_graph(gateway: ChatGateway):
    """
    prompt -> model -> parse. Errors raised by a node propagate out of ``ainvoke``
    untouched, so a parse failure never reaches the persistence step.
    """

    async def build_prompt(state: ItineraryState) -> Dict[str, Any]:
        return {"prompt": build_itinerary_prompt(state["request"], state["currency"])}

    async def call_model(state: ItineraryState) -> Dict[str, Any]:
        request = state["request"]
        logger.info("Requesting %s-day itinerary for %s (trip %s)", request.numDays, request.destination, request.tripId)
        content = await gateway.complete(SYSTEM_PROMPT, state["prompt"])
        return {"content": content}

    async def parse_response(state: ItineraryState) -> Dict[str, Any]:
        itinerary = parse_itinerary(state["content"])
        request = state["request"]
        if itinerary.budget_breakdown is not None:
            total = itinerary.budget_breakdown.total()
            if not request.budgetMin <= total <= request.budgetMax:
                logger.warning(
                    "Budget breakdown total %s outside requested range %s-%s (trip %s)",
                    total,
                    request.budgetMin,
                    request.budgetMax,
                    request.tripId,
                )
        if len(itinerary.days) != request.numDays:
            logger.warning(
                "Model returned %s days for a %s-day trip (trip %s)", len(itinerary.days), request.numDays, request.tripId
            )
        return {"itinerary": itinerary}

    builder = StateGraph(ItineraryState)
    builder.add_node("build_prompt", build_prompt)
    builder.add_node("call_model", call_model)
    builder.add_node("parse_response", parse_response)

    builder.set_entry_point("build_prompt")
    builder.add_edge("build_prompt", "call_model")
    builder.add_edge("call_model", "parse_response")
    builder.add_edge("parse_response", END)
    return builder.compile()


@lru_cache(maxsize=8)
def graph_for(gateway: ChatGateway):
    """Compiled graph shared by every request that goes through ``gateway``."""
    return build_itinerary_graph(gateway)


async def generate_itinerary(
    graph, request: GenerateItineraryRequest, currency: str = DEFAULT_CURRENCY
) -> GeneratedItinerary:
    initial_state: ItineraryState = {
        "request": request,
        "currency": currency,
        "prompt": "",
        "content": "",
        "itinerary": None,
    }
    result = await graph.ainvoke(initial_state)
    return result["itinerary"]

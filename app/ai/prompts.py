"""Prompt templates for itinerary generation."""

from app.api.models.schemas import GenerateItineraryRequest

SYSTEM_PROMPT = "You are a travel planning expert. Always respond with valid JSON only, no markdown formatting."

DEFAULT_CURRENCY = "INR"
CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}

ITINERARY_SCHEMA_EXAMPLE = """{
  "days": [
    {
      "day_number": 1,
      "summary": "Brief summary of the day",
      "activities": [
        {
          "place_name": "Place Name",
          "description": "What to do here",
          "time_slot": "morning|afternoon|evening",
          "start_time": "09:00 AM",
          "duration_minutes": 90,
          "estimated_cost": 500,
          "coordinates": { "lat": 15.4909, "lng": 73.8278 },
          "tips": "Local tip for this place",
          "is_backup": false,
          "transport_mode": "walk|bus|cab|auto",
          "transport_duration_minutes": 15,
          "transport_cost": 100,
          "sort_order": 1
        }
      ]
    }
  ],
  "budget_breakdown": {
    "accommodation": 5000,
    "food": 3000,
    "transport": 2000,
    "activities": 3000,
    "miscellaneous": 1000
  },
  "local_tips": {
    "tips": ["Tip 1", "Tip 2", "Tip 3"],
    "scams": ["Common scam 1", "Common scam 2"]
  }
}"""


def _amount(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")


def build_itinerary_prompt(request: GenerateItineraryRequest, currency: str = DEFAULT_CURRENCY) -> str:
    currency = (currency or DEFAULT_CURRENCY).upper()
    symbol = currency_symbol(currency)
    budget_min = f"{symbol}{_amount(request.budgetMin)}"
    budget_max = f"{symbol}{_amount(request.budgetMax)}"
    interests = ", ".join(request.interests) if request.interests else "not specified"
    style = request.travelStyle or "not specified"
    pace = request.travelPace or "moderate"
    start = request.startDate.isoformat() if request.startDate else "flexible"
    return f"""You are a travel planning AI. Create a detailed {request.numDays}-day itinerary for {request.destination}.

Travel details:
- Budget: {budget_min} to {budget_max} ({currency})
- Interests: {interests}
- Travel style: {style}
- Travel pace: {pace}
- Start date: {start}

Return a JSON object with this EXACT structure (no markdown, just pure JSON):
{ITINERARY_SCHEMA_EXAMPLE}

Rules:
- Include 3-5 activities per day for {pace} pace
- For each day include 1-2 backup/rainy day activities (is_backup: true)
- Include realistic coordinates for the places
- Budget breakdown should fit within {budget_min}-{budget_max}
- Include transport suggestions between consecutive activities
- Add local tips specific to {request.destination}
- All costs in {currency}"""

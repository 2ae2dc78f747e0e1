"""
openai_utils.py — Plant identification through a hosted multimodal model
------------------------------------------------------------------------

Provides functions for:

* Sending one plant photo (inline data URL) with the identification prompt
* Pulling the JSON object out of the model's answer

Used by the relay server; the Streamlit page never talks to the model directly.

Requirements:
- `openai` package for API access
- `backoff` for retry logic on rate limits and dropped connections
"""

import json
import re

import backoff
import openai
from openai import OpenAI

from config.settings import GPTMODEL

IDENTIFY_PROMPT = """Analyze this plant image and provide detailed information in the following JSON format:
{
  "name": "Common name of the plant",
  "scientificName": "Scientific name",
  "confidence": "Confidence percentage (number between 0-100)",
  "description": "Brief description of the plant",
  "keyFeatures": ["Key feature 1", "Key feature 2", "Key feature 3", "Key feature 4"],
  "care": {
    "light": "Light requirements",
    "water": "Watering needs",
    "humidity": "Humidity requirements",
    "temperature": "Temperature range",
    "soil": "Soil preferences",
    "fertilizer": "Fertilizer schedule"
  },
  "commonProblems": ["Problem 1", "Problem 2", "Problem 3"],
  "propagation": "How to propagate the plant, as short sentences",
  "growthRate": "Slow, moderate or fast, with a short note"
}
Answer with the JSON object only."""


class ModelResponseError(ValueError):
    """The model answered, but not with a usable JSON object."""


_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(text: str) -> dict:
    if not text:
        raise ModelResponseError("empty model response")
    m = _JSON_BLOCK.search(text)
    if not m:
        raise ModelResponseError("no JSON object in model response")
    try:
        raw = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ModelResponseError(f"invalid JSON in model response: {e.msg}") from e
    if not isinstance(raw, dict):
        raise ModelResponseError("model response is not a JSON object")
    return raw


@backoff.on_exception(backoff.expo, (openai.RateLimitError, openai.APIConnectionError), max_tries=3)
def identify_plant_image(image_b64: str, mime_type: str, api_key: str, model: str = GPTMODEL) -> dict:
    """
    Asks the model to identify the plant in a base64-encoded image.

    Args:
        image_b64 (str): Image bytes, base64-encoded.
        mime_type (str): e.g. "image/jpeg".
        api_key (str): Caller-supplied OpenAI API key.
        model (str): Multimodal chat model.

    Returns:
        dict: The plant JSON object as produced by the model (unvalidated).
    """
    client = OpenAI(api_key=api_key)
    response = client.chat.completions.create(
        model=model,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system",
             "content": "You are a botanist who identifies plants from photos and answers only in JSON."},
            {"role": "user", "content": [
                {"type": "text", "text": IDENTIFY_PROMPT},
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{image_b64}"}},
            ]},
        ],
    )

    return extract_json_object(response.choices[0].message.content)

"""Thin litellm wrapper used by the documentation importer."""

import logging

from litellm import completion

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini/gemini-2.0-flash"


class LlmClient:
    """Sends a single system+user exchange to any litellm-supported model."""

    def __init__(self, model: str | None = None, temperature: float = 0.0):
        self.model = model or DEFAULT_MODEL
        self.temperature = temperature

    def call(self, system: str, user: str, json_mode: bool = False) -> str:
        """Return the text of the model's reply ("" if the model sent none)."""
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug("Calling %s with %d prompt characters", self.model, len(system) + len(user))
        response = completion(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=self.temperature,
            **kwargs,
        )
        return response.choices[0].message.content or ""

"""
One-shot app categorization through a hosted Gemini model.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import google.generativeai as genai

import logger as app_logger
from models import OTHER_CATEGORY, SUGGESTED_CATEGORIES, AppRecord
from utils import extract_json_object

_LOGGER = app_logger.get_logger()

EMPTY_JSON = "{}"
TEMPERATURE = 0.2

ModelFactory = Callable[[str, float], Any]


@dataclass(frozen=True)
class CategorizeResult:
    """Outcome of the remote call: response text, or the reason it failed."""

    text: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

    def json_text(self) -> str:
        if not self.ok:
            return EMPTY_JSON
        return extract_json_object(self.text) or EMPTY_JSON


def build_prompt(apps: Sequence[AppRecord]) -> str:
    app_lines = ",\n".join(f'  "{app.identifier}": "{app.display_name}"' for app in apps)
    categories = "\n".join(f"- {name}" for name in SUGGESTED_CATEGORIES)
    header = textwrap.dedent(
        f"""\
        You are an expert app categorization engine. Your task is to categorize the provided list of Android apps.
        Please categorize them into categories:
        {{categories}}

        You can create new categories if needed, but do not use the "{OTHER_CATEGORY}" category unless absolutely necessary. Make sure too many apps don't end up in the same category.

        Your response MUST be a single, raw JSON object. Do not include any explanatory text, markdown, or anything else outside of the JSON object.
        The JSON object must have package names as keys and their corresponding category as string values.

        Here is the list of apps:
        """
    )
    return header.replace("{categories}", categories) + "{\n" + app_lines + "\n}"


def _default_model_factory(api_key: str) -> ModelFactory:
    def factory(model_name: str, temperature: float) -> Any:
        if api_key:
            genai.configure(api_key=api_key)
        return genai.GenerativeModel(
            model_name,
            generation_config=genai.GenerationConfig(temperature=temperature),
        )

    return factory


class RemoteCategorizer:
    def __init__(
        self,
        model_name: str,
        api_key: str = "",
        model_factory: Optional[ModelFactory] = None,
    ) -> None:
        self.model_name = model_name
        self._model_factory = model_factory or _default_model_factory(api_key)

    def request(self, apps: Sequence[AppRecord]) -> CategorizeResult:
        prompt = build_prompt(apps)
        try:
            model = self._model_factory(self.model_name, TEMPERATURE)
            response = model.generate_content(prompt)
            text = response.text
        except Exception as exc:  # any SDK or transport failure
            _LOGGER.error("Categorization call to {} failed: {}", self.model_name, exc)
            return CategorizeResult(error=str(exc) or type(exc).__name__)
        if not text:
            return CategorizeResult(error="empty response")
        _LOGGER.debug("Categorization response: {}", text)
        return CategorizeResult(text=text)

    def categorize(self, apps: Sequence[AppRecord]) -> str:
        """Return JSON text mapping identifier -> category; "{}" on any failure."""
        result = self.request(apps)
        raw = result.json_text()
        if result.ok and raw == EMPTY_JSON:
            _LOGGER.warning("Categorization response held no JSON object.")
        return raw

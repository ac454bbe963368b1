"""Send questions and extracted interactions to a chat-completion model.

Model access goes through the llm library, so any model with an installed
plugin can be used; the OpenAI models offered by `setup` work out of the box.
"""

import logging
from typing import Optional

import llm

from .config import ExplainSettings, require_credentials
from .errors import EmptyQueryError, ModelError
from .transcript import ExtractedInteraction

logger = logging.getLogger(__name__)

EXPLAIN_INSTRUCTION = "Give me an explanation for this terminal error:"


def build_explain_prompt(interaction: ExtractedInteraction) -> str:
    """Format the last command and its output as a plain-text request."""
    output = "\n".join(interaction.output)
    return f"Command: {interaction.command}\nOutput: {output}\n{EXPLAIN_INSTRUCTION}"


class AssistantClient:
    """Thin wrapper around an llm model configured from ExplainSettings."""

    def __init__(self, settings: ExplainSettings):
        self.settings = settings
        self._model: Optional[llm.Model] = None

    @property
    def model(self) -> llm.Model:
        """Resolve the configured model once, applying the stored API key."""
        if self._model is None:
            require_credentials(self.settings)
            try:
                model = llm.get_model(self.settings.engine)
            except llm.UnknownModelError as e:
                raise ModelError(f"Unknown model '{self.settings.engine}': {e}") from e
            model.key = self.settings.api_key
            self._model = model
        return self._model

    def ask(self, question: str) -> str:
        """Send a single user message and return the stripped response text.

        Raises:
            EmptyQueryError: if question is blank
            ConfigurationError: if key or engine is missing
            ModelError: if the model cannot be resolved or the request fails
        """
        if not question or not question.strip():
            raise EmptyQueryError()

        model = self.model
        logger.debug(f"Prompting {model.model_id} ({len(question)} chars)")
        try:
            response = model.prompt(
                question,
                stream=False,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                top_p=self.settings.top_p,
            )
            text = response.text()
        except Exception as e:
            logger.debug(f"Model request failed: {e!r}")
            raise ModelError(f"Sorry, something went wrong: {e}") from e
        return text.strip()

    def explain(self, interaction: ExtractedInteraction) -> str:
        """Ask the model to explain the given command and output."""
        return self.ask(build_explain_prompt(interaction))

"""Text-completion client backed by the OpenAI chat completions API."""
import os
from typing import Optional
from dataclasses import dataclass
from openai import OpenAI, OpenAIError

from nl2gherkin.config import CompletionConfig
from nl2gherkin.errors import CompletionError


@dataclass
class CompletionRequest:
    system_prompt: str
    user_prompt: str
    temperature: float = 0.2
    max_tokens: int = 1500


class CompletionClient:
    """Sends a single system + user prompt pair and returns the reply text."""

    def __init__(self, config: CompletionConfig):
        self.config = config
        self._openai = None

    def _ensure_openai(self):
        if self._openai is None:
            api_key = os.environ.get(self.config.api_key_env)
            if not api_key:
                raise CompletionError(
                    f"{self.config.api_key_env} is required in environment variables"
                )
            base_url = self.config.base_url or os.environ.get("OPENAI_BASE_URL")
            kwargs = {"api_key": api_key, "base_url": base_url}
            if self.config.timeout is not None:
                kwargs["timeout"] = self.config.timeout
            self._openai = OpenAI(**kwargs)

    def complete(self, request: CompletionRequest, model: Optional[str] = None) -> str:
        """
        Run one chat completion.

        Raises:
            CompletionError: missing API key or any failure of the API call
        """
        self._ensure_openai()
        try:
            completion = self._openai.chat.completions.create(
                model=model or self.config.model,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_prompt},
                ],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except OpenAIError as e:
            raise CompletionError(f"Completion request failed: {e}") from e

        if not completion.choices:
            return ''
        return completion.choices[0].message.content or ''

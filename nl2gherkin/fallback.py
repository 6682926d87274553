"""Fallback generator: asks the completion service for a feature when extraction finds nothing."""
import json
import re
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from nl2gherkin.completion import CompletionRequest
from nl2gherkin.feature_assembler import create_title, determine_tags, narrative
from nl2gherkin.models import Feature, Scenario, Step, StepKeyword, unique_tags
from nl2gherkin.prompts import SYSTEM_PROMPT, build_step_generation_prompt
from nl2gherkin.step_mapper import normalize_keywords, split_keyword
from nl2gherkin.templates import default_steps


FENCED_JSON = re.compile(r'```json\s*([\s\S]*?)\s*```')


@dataclass
class FallbackResult:
    """Result from the fallback generator."""
    feature: Feature
    fallback_used: bool  # True when the generic default feature was returned
    notes: List[str] = field(default_factory=list)


class FallbackGenerator:
    """Builds a feature through the completion service, degrading to a generic one."""

    def __init__(self, client, config, mapper):
        """
        Args:
            client: object with ``complete(CompletionRequest) -> str``
            config: loaded Config
            mapper: StepMapper used to infer missing step keywords
        """
        self.client = client
        self.config = config
        self.mapper = mapper

    def generate(self, description: str, existing_steps: Optional[List[str]] = None) -> Feature:
        return self.run(description, existing_steps).feature

    def run(self, description: str, existing_steps: Optional[List[str]] = None) -> FallbackResult:
        """
        Generate a feature for a description the extractor could not handle.

        Raises:
            CompletionError: the completion service is unreachable
        """
        if not self.config.fallbacks.enable_llm_synthesis:
            return FallbackResult(
                feature=self.default_feature(description),
                fallback_used=True,
                notes=["LLM synthesis disabled"]
            )

        request = CompletionRequest(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_step_generation_prompt(description, existing_steps),
            temperature=self.config.completion.temperature,
            max_tokens=self.config.completion.max_tokens
        )
        reply = self.client.complete(request)

        payload, problem = self.parse_reply(reply)
        if payload is None:
            print(f"Warning: unusable completion output ({problem}). Using default feature.")
            return FallbackResult(
                feature=self.default_feature(description),
                fallback_used=True,
                notes=[problem]
            )

        return FallbackResult(
            feature=self._feature_from_payload(description, payload),
            fallback_used=False
        )

    def parse_reply(self, reply: str) -> Tuple[Optional[Dict[str, Any]], str]:
        """
        Extract and validate the JSON payload of a reply.

        Returns:
            (payload, "") on success, (None, reason) otherwise
        """
        match = FENCED_JSON.search(reply or '')
        raw = match.group(1) if match else (reply or '').strip()

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return None, "reply is not JSON"

        if not isinstance(payload, dict):
            return None, "reply is not a JSON object"

        for key in ('feature', 'scenario'):
            if not isinstance(payload.get(key), str) or not payload[key].strip():
                return None, f"missing or invalid '{key}'"

        steps = payload.get('steps')
        if not isinstance(steps, list) or not steps:
            return None, "missing or empty 'steps'"
        for step in steps:
            if not isinstance(step, dict) or not isinstance(step.get('text'), str):
                return None, "step without text"
            if not split_keyword(step['text'].strip())[1]:
                return None, "step without text"

        tags = payload.get('tags', [])
        if not isinstance(tags, list):
            return None, "invalid 'tags'"

        return payload, ""

    def default_feature(self, description: str) -> Feature:
        title = create_title(description)
        return Feature(
            title=title,
            description=narrative(description),
            tags=determine_tags(description),
            scenarios=[Scenario(title=title, steps=default_steps())]
        )

    def _feature_from_payload(self, description: str, payload: Dict[str, Any]) -> Feature:
        steps: List[Step] = []
        for index, item in enumerate(payload['steps']):
            prefix, text = split_keyword(' '.join(item['text'].split()))
            keyword = StepKeyword.parse(str(item.get('type', ''))) or prefix
            if keyword is None:
                keyword = self.mapper.determine_keyword(text, index, steps)
            parameters = item.get('parameters')
            steps.append(Step(
                keyword=keyword,
                text=text,
                data=parameters if isinstance(parameters, dict) and parameters else None
            ))

        return Feature(
            title=' '.join(payload['feature'].split()),
            description=narrative(description),
            tags=unique_tags(payload.get('tags') or []),
            scenarios=[Scenario(title=' '.join(payload['scenario'].split()), steps=normalize_keywords(steps))]
        )

"""Feature assembly: turns descriptions and step lines into Feature objects."""
import re
from typing import List, Optional
from dataclasses import dataclass, field

from nl2gherkin.errors import EmptyDescriptionError, Nl2GherkinError
from nl2gherkin.models import Feature, Scenario, Step, unique_tags
from nl2gherkin.normalizer import collapse_whitespace
from nl2gherkin.step_mapper import split_keyword
from nl2gherkin.templates import (
    DEFAULT_FEATURE_TITLE,
    REGISTRATION_KEYWORDS,
    default_registration_scenario,
    registration_template,
)


MAX_TITLE_LENGTH = 50

# Domain tag -> description keywords
DOMAIN_TAGS = [
    ('@login', ['login', 'sign in']),
    ('@registration', ['register', 'sign up']),
    ('@search', ['search']),
]

SENTENCE_END = re.compile(r'[.!?]')


@dataclass
class AssemblyResult:
    """A feature plus how it was produced."""
    feature: Feature
    source: str  # template, mapped, llm or default
    notes: List[str] = field(default_factory=list)


def create_title(description: str) -> str:
    """First sentence of the description, at most 50 characters."""
    first_sentence = collapse_whitespace(SENTENCE_END.split(description, 1)[0])
    if not first_sentence:
        return DEFAULT_FEATURE_TITLE
    if len(first_sentence) <= MAX_TITLE_LENGTH:
        return first_sentence
    return first_sentence[:MAX_TITLE_LENGTH - 3] + '...'


def determine_tags(description: str) -> List[str]:
    tags = ['@automated']
    lowered = description.lower()
    for tag, keywords in DOMAIN_TAGS:
        if any(keyword in lowered for keyword in keywords):
            tags.append(tag)
    return tags


def narrative(description: str) -> str:
    """The 'As a / I want / So that' block for a description."""
    return (
        "As a user\n"
        f"I want to {collapse_whitespace(description).lower()}\n"
        "So that I can complete my task"
    )


def is_registration(description: str) -> bool:
    lowered = description.lower()
    return any(keyword in lowered for keyword in REGISTRATION_KEYWORDS)


class FeatureAssembler:
    """Builds features from descriptions, step lines or Gherkin text."""

    def __init__(self, extractor, mapper, catalog=None, fallback=None):
        self.extractor = extractor
        self.mapper = mapper
        self.catalog = catalog
        self.fallback = fallback

    def assemble(self, description: str) -> Feature:
        """
        Translate a description into a Feature.

        Raises:
            EmptyDescriptionError: description is empty or whitespace
            CompletionError: the fallback could not reach the completion service
        """
        return self.translate(description).feature

    def translate(self, description: str) -> AssemblyResult:
        """Like assemble, also reporting which path produced the feature."""
        if not description or not description.strip():
            raise EmptyDescriptionError("Description must not be empty")

        if is_registration(description):
            feature = self.parse_gherkin(registration_template(description), description)
            return AssemblyResult(feature=feature, source="template")

        intents = self.extractor.extract_intents(description)
        if intents:
            step_lines = self.mapper.to_steps(intents)
            feature = self.from_steps(description, step_lines)
            return AssemblyResult(feature=feature, source="mapped")

        if self.fallback is None:
            raise Nl2GherkinError("No intents found and no fallback generator configured")

        existing_steps = self.catalog.patterns() if self.catalog is not None else []
        result = self.fallback.run(description, existing_steps)
        return AssemblyResult(
            feature=result.feature,
            source="default" if result.fallback_used else "llm",
            notes=list(result.notes)
        )

    def from_steps(self, description: str, step_lines: List[str]) -> Feature:
        """Build a single-scenario feature around the given step lines."""
        title = create_title(description)
        steps = self.mapper.assign_keywords(step_lines)
        return Feature(
            title=title,
            description=narrative(description),
            tags=determine_tags(description),
            scenarios=[Scenario(title=title, steps=steps)]
        )

    def parse_gherkin(self, text: str, description: Optional[str] = None) -> Feature:
        """
        Rebuild a Feature from Gherkin text.

        Tag lines before ``Feature:`` tag the feature, later ones tag the
        next scenario. Scenarios without steps are dropped; if none remain
        the canonical registration scenario is used.
        """
        title = None
        description_lines = []
        feature_tags: List[str] = []
        pending_tags: List[str] = []
        scenarios: List[Scenario] = []
        current = None

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue

            if line.startswith('@'):
                tags = [t for t in line.split() if t.startswith('@')]
                if title is None:
                    feature_tags.extend(tags)
                else:
                    pending_tags.extend(tags)
            elif line.startswith('Feature:'):
                title = line[len('Feature:'):].strip()
            elif line.startswith('Scenario:'):
                if current is not None and current.steps:
                    scenarios.append(current)
                current = Scenario(
                    title=line[len('Scenario:'):].strip(),
                    steps=[],
                    tags=unique_tags(pending_tags)
                )
                pending_tags = []
            elif current is not None:
                keyword, step_text = split_keyword(line)
                if keyword is not None and step_text:
                    current.steps.append(Step(keyword=keyword, text=step_text))
            elif title is not None:
                description_lines.append(line)

        if current is not None and current.steps:
            scenarios.append(current)

        if not scenarios:
            scenarios.append(default_registration_scenario())

        if description_lines:
            feature_description = '\n'.join(description_lines)
        elif description:
            feature_description = narrative(description)
        else:
            feature_description = ''

        return Feature(
            title=title or (create_title(description) if description else DEFAULT_FEATURE_TITLE),
            description=feature_description,
            tags=unique_tags(feature_tags),
            scenarios=scenarios
        )

"""Core data structures for the translation pipeline."""
import re
from enum import Enum
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field


class ActionType(Enum):
    """Intent categories recognised in a description."""
    NAVIGATION = "navigation"
    CLICK = "click"
    INPUT = "input"
    VERIFICATION = "verification"
    WAIT = "wait"
    SCREENSHOT = "screenshot"
    CUSTOM = "custom"


class StepKeyword(Enum):
    """Gherkin step keywords."""
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"
    AND = "And"
    BUT = "But"

    @classmethod
    def parse(cls, text: str) -> Optional["StepKeyword"]:
        """Return the keyword for a case-insensitive name, or None."""
        if not text:
            return None
        lowered = text.strip().lower()
        for keyword in cls:
            if keyword.value.lower() == lowered:
                return keyword
        return None

    @property
    def is_continuation(self) -> bool:
        return self in (StepKeyword.AND, StepKeyword.BUT)


# Canonical Given -> When -> Then ordering
KEYWORD_RANK = {
    StepKeyword.GIVEN: 0,
    StepKeyword.WHEN: 1,
    StepKeyword.THEN: 2,
}


@dataclass
class Intent:
    """A classified clause of a description."""
    action_type: ActionType
    description: str
    priority: int
    target: Optional[str] = None
    value: Optional[str] = None


@dataclass
class Step:
    """A single Gherkin step line."""
    keyword: StepKeyword
    text: str
    data: Optional[Dict[str, Any]] = None


@dataclass
class Scenario:
    """A Gherkin scenario."""
    title: str
    steps: List[Step]
    tags: List[str] = field(default_factory=list)


@dataclass
class Feature:
    """A Gherkin feature document."""
    title: str
    description: str
    scenarios: List[Scenario]
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StepDefinition:
    """An existing step definition found in the step source tree."""
    keyword: StepKeyword
    pattern: str
    regex: "re.Pattern"
    source_file: str
    line: int

    def match(self, text: str) -> Optional[List[str]]:
        """Return captured arguments if text matches end-to-end, else None."""
        match = self.regex.match(text.strip())
        if not match:
            return None
        return [group for group in match.groups()]

    @property
    def location(self) -> str:
        return f"{self.source_file}:{self.line}"


def unique_tags(tags: List[str]) -> List[str]:
    """De-duplicate tags preserving order, adding a leading '@' where missing.

    A Gherkin tag cannot contain whitespace, so "smoke test" gives two tags.
    """
    result = []
    for raw in tags:
        for tag in str(raw).split():
            if not tag.lstrip('@'):
                continue
            if not tag.startswith('@'):
                tag = '@' + tag
            if tag not in result:
                result.append(tag)
    return result

"""Clause-to-step mapping: intents to ordered Gherkin step lines."""
import re
from typing import Callable, Dict, List, Optional, Tuple

from nl2gherkin.models import ActionType, Intent, KEYWORD_RANK, Step, StepKeyword
from nl2gherkin.normalizer import phrase_regex


# Every ActionType must appear here and in StepMapper._renderers
BUCKET_KEYWORDS: Dict[ActionType, StepKeyword] = {
    ActionType.NAVIGATION: StepKeyword.GIVEN,
    ActionType.CLICK: StepKeyword.WHEN,
    ActionType.INPUT: StepKeyword.WHEN,
    ActionType.WAIT: StepKeyword.WHEN,
    ActionType.VERIFICATION: StepKeyword.THEN,
    ActionType.SCREENSHOT: StepKeyword.AND,
    ActionType.CUSTOM: StepKeyword.AND,
}

BUCKET_ORDER = [StepKeyword.GIVEN, StepKeyword.WHEN, StepKeyword.THEN, StepKeyword.AND]

# Keyword cues for standalone role assignment, checked in this order
ROLE_CUES: List[Tuple[StepKeyword, List[str]]] = [
    (StepKeyword.THEN, ['see', 'verify', 'should', 'expect', 'assert', 'check']),
    (StepKeyword.WHEN, ['click', 'enter', 'type', 'select', 'choose', 'submit']),
    (StepKeyword.GIVEN, ['navigate', 'open', 'go to', 'browser']),
]

KEYWORD_PREFIX = re.compile(r'^\s*(Given|When|Then|And|But)\s+(.*)$', re.IGNORECASE | re.DOTALL)


def split_keyword(line: str) -> Tuple[Optional[StepKeyword], str]:
    """Split 'When I click' into (WHEN, 'I click'); (None, line) without a prefix."""
    match = KEYWORD_PREFIX.match(line)
    if not match:
        return None, line.strip()
    return StepKeyword.parse(match.group(1)), match.group(2).strip()


def normalize_keywords(steps: List[Step]) -> List[Step]:
    """
    Enforce Given first and a monotonic Given -> When -> Then progression.

    Repeated or backwards transitions become And.
    """
    result = []
    effective = None
    for index, step in enumerate(steps):
        keyword = step.keyword
        if index == 0:
            keyword = StepKeyword.GIVEN
        elif keyword.is_continuation:
            pass
        elif KEYWORD_RANK[keyword] <= KEYWORD_RANK[effective]:
            keyword = StepKeyword.AND

        if not keyword.is_continuation:
            effective = keyword
        result.append(Step(keyword=keyword, text=step.text, data=step.data))
    return result


class StepMapper:
    """Converts intents into Gherkin step lines."""

    def __init__(self, catalog=None):
        self.catalog = catalog
        self._renderers: Dict[ActionType, Callable[[Intent], Optional[str]]] = {
            ActionType.NAVIGATION: self._render_navigation,
            ActionType.CLICK: self._render_click,
            ActionType.INPUT: self._render_input,
            ActionType.WAIT: self._render_wait,
            ActionType.VERIFICATION: self._render_verification,
            ActionType.SCREENSHOT: self._render_verbatim,
            ActionType.CUSTOM: self._render_verbatim,
        }
        self._role_cues = [
            (keyword, [phrase_regex(cue) for cue in cues]) for keyword, cues in ROLE_CUES
        ]

    def to_steps(self, intents: List[Intent]) -> List[str]:
        """
        Render intents bucket by bucket: navigation, interactions,
        verifications, then everything else. Source order is kept
        inside a bucket.
        """
        lines = []
        for bucket in BUCKET_ORDER:
            members = [i for i in intents if BUCKET_KEYWORDS[i.action_type] == bucket]
            for intent in sorted(members, key=lambda i: i.priority):
                lines.append(self.render(intent))
        return lines

    def render(self, intent: Intent) -> str:
        keyword = BUCKET_KEYWORDS[intent.action_type]

        # A clause already written as an existing step is kept verbatim
        if self.catalog is not None and self.catalog.find_matching_step(intent.description):
            return f"{keyword.value} {intent.description}"

        text = self._renderers[intent.action_type](intent)
        return f"{keyword.value} {text or intent.description}"

    def assign_keywords(self, step_lines: List[str]) -> List[Step]:
        """Turn raw step lines into Steps, inferring missing keywords."""
        steps: List[Step] = []
        for index, line in enumerate(step_lines):
            keyword, text = split_keyword(line)
            if keyword is None:
                keyword = self.determine_keyword(text, index, steps)
            steps.append(Step(keyword=keyword, text=text))
        return normalize_keywords(steps)

    def determine_keyword(self, text: str, index: int, previous_steps: List[Step]) -> StepKeyword:
        """Guess the keyword of an unprefixed step from its wording and position."""
        if index == 0 or not previous_steps:
            return StepKeyword.GIVEN

        previous = previous_steps[-1].keyword
        effective = _effective_keyword(previous_steps)

        for keyword, patterns in self._role_cues:
            if any(p.search(text) for p in patterns):
                return StepKeyword.AND if keyword == effective else keyword

        return StepKeyword.AND if previous == StepKeyword.THEN else previous

    def _render_navigation(self, intent: Intent) -> Optional[str]:
        if intent.target:
            return f'I am on page "{intent.target}"'
        return None

    def _render_click(self, intent: Intent) -> Optional[str]:
        if intent.target:
            return f'I click on "{intent.target}"'
        return None

    def _render_input(self, intent: Intent) -> Optional[str]:
        if intent.target and intent.value:
            return f'I enter "{intent.value}" in the {intent.target} field'
        return None

    def _render_wait(self, intent: Intent) -> Optional[str]:
        return "I wait for the page to load"

    def _render_verification(self, intent: Intent) -> Optional[str]:
        if intent.value:
            return f'I should see "{intent.value}"'
        return None

    def _render_verbatim(self, intent: Intent) -> Optional[str]:
        return None


def _effective_keyword(steps: List[Step]) -> Optional[StepKeyword]:
    for step in reversed(steps):
        if not step.keyword.is_continuation:
            return step.keyword
    return None

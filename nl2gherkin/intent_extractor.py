"""Intent extraction: segment a description and classify each clause."""
import re
from typing import List, Optional, Tuple

from nl2gherkin.models import ActionType, Intent
from nl2gherkin.normalizer import QUOTED_PATTERN, first_quoted, phrase_regex


# Checked in this order; the first category with a matching keyword wins
ACTION_KEYWORDS: List[Tuple[ActionType, List[str]]] = [
    (ActionType.NAVIGATION, ['go to', 'navigate to', 'visit', 'open', 'browse to', 'access']),
    (ActionType.CLICK, ['click', 'press', 'select', 'choose', 'tap', 'check', 'uncheck', 'toggle']),
    (ActionType.INPUT, ['enter', 'type', 'fill', 'input', 'write', 'provide', 'supply', 'set']),
    (ActionType.VERIFICATION, ['see', 'verify', 'check', 'confirm', 'validate', 'ensure', 'expect', 'should']),
    (ActionType.WAIT, ['wait', 'pause', 'delay', 'sleep']),
    (ActionType.SCREENSHOT, ['screenshot', 'capture', 'take picture', 'save image']),
]

CLAUSE_SPLIT = re.compile(
    r'[.!?]+(?=\s|$)|\n+|\b(?:and|then|after|before|when|while)\b',
    re.IGNORECASE
)

NAVIGATION_CUES = ['to', 'on']
CLICK_CUES = ['on', 'the', 'button', 'link']
FIELD_NOUNS = ['field', 'input', 'textbox']
FIELD_PREPOSITIONS = ['in', 'into', 'to', 'on']
VERIFICATION_CUES = ['should see', 'should be', 'see', 'verify', 'check', 'confirm',
                     'validate', 'ensure', 'expect', 'should']

INPUT_STOP_WORDS = set(FIELD_PREPOSITIONS) | {'enter', 'type', 'fill', 'write', 'provide', 'supply', 'set', 'with'}

ARTICLES = {'the', 'a', 'an'}
URL_PATTERN = re.compile(r'https?://\S+|(?<!\w)/[\w\-./?=&%:]*')
PROTECTED = re.compile(r'\x00(\d+)\x00')


class IntentExtractor:
    """Extracts action intents from natural language descriptions."""

    def __init__(self, max_target_words: int = 3):
        self.max_target_words = max_target_words
        self._taxonomy = [
            (action_type, [phrase_regex(k) for k in keywords])
            for action_type, keywords in ACTION_KEYWORDS
        ]

    def extract_intents(self, description: str) -> List[Intent]:
        """
        Segment a description into clauses and classify each one.

        Args:
            description: Free-text test description

        Returns:
            Intents in clause order (possibly empty)
        """
        intents = []
        for index, clause in enumerate(self.split_clauses(description)):
            action_type = self.classify(clause)
            intents.append(self._create_intent(action_type, clause, index))
        return intents

    def split_clauses(self, description: str) -> List[str]:
        """Split on sentence terminators and connective words, outside quotes."""
        if not description:
            return []

        quoted_spans = []

        def protect(match):
            quoted_spans.append(match.group(0))
            return f"\x00{len(quoted_spans) - 1}\x00"

        protected = QUOTED_PATTERN.sub(protect, description)

        clauses = []
        for part in CLAUSE_SPLIT.split(protected):
            restored = PROTECTED.sub(lambda m: quoted_spans[int(m.group(1))], part)
            restored = restored.strip().strip(',;:').strip()
            if restored:
                clauses.append(restored)
        return clauses

    def classify(self, clause: str) -> ActionType:
        """Return the first category whose keywords occur in the clause."""
        # Quoted values ("Open account") must not drive classification
        unquoted = QUOTED_PATTERN.sub(' ', clause)
        for action_type, patterns in self._taxonomy:
            if any(p.search(unquoted) for p in patterns):
                return action_type
        return ActionType.CUSTOM

    def _create_intent(self, action_type: ActionType, clause: str, index: int) -> Intent:
        intent = Intent(action_type=action_type, description=clause, priority=index)

        if action_type == ActionType.NAVIGATION:
            intent.target = self._extract_navigation_target(clause)
        elif action_type == ActionType.CLICK:
            intent.target = first_quoted(clause) or self._words_after(clause, CLICK_CUES)
        elif action_type == ActionType.INPUT:
            intent.target, intent.value = self._extract_input_details(clause)
        elif action_type == ActionType.VERIFICATION:
            intent.value = self._extract_expected_value(clause)

        return intent

    def _extract_navigation_target(self, clause: str) -> Optional[str]:
        quoted = first_quoted(clause)
        if quoted:
            return quoted
        url = URL_PATTERN.search(clause)
        if url and len(url.group(0)) > 1:
            return url.group(0).rstrip('.,;')
        return self._words_after(clause, NAVIGATION_CUES)

    def _extract_input_details(self, clause: str) -> Tuple[Optional[str], Optional[str]]:
        value = first_quoted(clause)
        unquoted = QUOTED_PATTERN.sub(' ', clause)

        # "the email field" - the field name sits right before the field noun
        for noun in FIELD_NOUNS:
            match = phrase_regex(noun).search(unquoted)
            if match:
                before = [w for w in unquoted[:match.start()].split() if w.lower() not in ARTICLES]
                if before:
                    # stop at the preposition or verb that introduces the field
                    for i in range(len(before) - 1, -1, -1):
                        if before[i].lower() in INPUT_STOP_WORDS:
                            before = before[i + 1:]
                            break
                    target = ' '.join(before[-self.max_target_words:])
                    if target:
                        return self._clean_target(target), value

        target = self._words_after(unquoted, FIELD_PREPOSITIONS)
        return target, value

    def _extract_expected_value(self, clause: str) -> Optional[str]:
        quoted = first_quoted(clause)
        if quoted:
            return quoted
        for cue in VERIFICATION_CUES:
            match = phrase_regex(cue).search(clause)
            if match:
                expected = clause[match.end():].strip()
                expected = re.sub(r'^that\s+', '', expected, flags=re.IGNORECASE)
                expected = expected.strip(' .,;:')
                return expected or None
        return None

    def _words_after(self, text: str, cues: List[str]) -> Optional[str]:
        """The next few words after the first cue (in cue order) found in text."""
        for cue in cues:
            match = phrase_regex(cue).search(text)
            if match:
                words = text[match.end():].split()[:self.max_target_words]
                target = self._clean_target(' '.join(words))
                return target or None
        return None

    def _clean_target(self, target: str) -> str:
        words = target.strip(' .,;:"\'').split()
        while words and words[0].lower() in ARTICLES:
            words = words[1:]
        while words and words[-1].lower() in FIELD_NOUNS:
            words = words[:-1]
        return ' '.join(words).strip(' .,;:"\'')

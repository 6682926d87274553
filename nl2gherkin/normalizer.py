"""Normalization module for descriptions and step patterns."""
import re
import unicodedata
from typing import List, Optional
from dataclasses import dataclass, field
import spacy


@dataclass
class NormalizedResult:
    """Normalization result."""
    normalized_text: str
    keywords: List[str] = field(default_factory=list)


class Normalizer:
    """Normalizes free text for keyword matching."""

    # Words this short carry no signal for similarity ranking
    MIN_KEYWORD_LENGTH = 4

    def __init__(self, use_lemmatization: bool = False, spacy_model: str = "en_core_web_sm"):
        self.use_lemmatization = use_lemmatization
        self.nlp = None

        if use_lemmatization:
            try:
                self.nlp = spacy.load(spacy_model)
            except OSError:
                print(f"Warning: spaCy model '{spacy_model}' not found. Lemmatization disabled.")
                self.use_lemmatization = False

    def normalize(self, text: str) -> NormalizedResult:
        """Normalize a description or step text."""
        if not text or not text.strip():
            return NormalizedResult(normalized_text="")

        # Unicode normalization
        normalized = unicodedata.normalize('NFKC', text)

        normalized = normalized.lower()
        normalized = self._clean_text(normalized)

        if self.use_lemmatization and self.nlp:
            normalized = self._lemmatize(normalized)

        return NormalizedResult(
            normalized_text=normalized,
            keywords=self._extract_keywords(normalized)
        )

    def keywords(self, text: str) -> List[str]:
        """Return the significant words of a text, in order."""
        return self.normalize(text).keywords

    def clean_description_line(self, line: str) -> str:
        """Strip list numbering and bullets from a line of a description file."""
        cleaned = unicodedata.normalize('NFKC', line)
        # "1.", "2)", "a.", "Step 3:", "-", "*" at the start of the line
        patterns = [
            r'^\s*\d+\s*[\.\):\-]\s+',
            r'^\s*[a-zA-Z]\s*[\.\)]\s+',
            r'^\s*[Ss]tep\s*\d+\s*[\.\):\-]?\s*',
            r'^\s*[•\-\*]\s+',
        ]
        for pattern in patterns:
            cleaned = re.sub(pattern, '', cleaned)
        return cleaned.strip()

    def _clean_text(self, text: str) -> str:
        """Clean text by removing artifacts."""
        # Drop Cucumber placeholders and punctuation, keep word characters
        text = re.sub(r'\{[^}]*\}', ' ', text)
        text = re.sub(r'[^\w\s]', ' ', text)
        text = re.sub(r'\s+', ' ', text)
        return text.strip()

    def _lemmatize(self, text: str) -> str:
        """Lemmatize text using spaCy."""
        if not self.nlp:
            return text

        doc = self.nlp(text)
        lemmatized = []
        for token in doc:
            if token.pos_ in ['VERB', 'NOUN']:
                lemmatized.append(token.lemma_)
            else:
                lemmatized.append(token.text)
        return ' '.join(lemmatized)

    def _extract_keywords(self, text: str) -> List[str]:
        words = []
        for word in text.split():
            if len(word) >= self.MIN_KEYWORD_LENGTH and word not in words:
                words.append(word)
        return words


# Single quotes only count outside words so apostrophes ("user's") are ignored
QUOTED_PATTERN = re.compile(r'"([^"]+)"|(?<!\w)\'([^\']+)\'(?!\w)')


def extract_quoted(text: str) -> List[str]:
    """Return the contents of double- or single-quoted spans, in order."""
    values = []
    for match in QUOTED_PATTERN.finditer(text or ''):
        values.append(match.group(1) if match.group(1) is not None else match.group(2))
    return values


def first_quoted(text: str) -> Optional[str]:
    """Return the first quoted span of text, or None."""
    values = extract_quoted(text)
    return values[0] if values else None


def phrase_regex(phrase: str) -> "re.Pattern":
    """Case-insensitive whole-word matcher for a keyword or phrase."""
    return re.compile(r'\b' + r'\s+'.join(re.escape(w) for w in phrase.split()) + r'\b', re.IGNORECASE)


def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text or '').strip()

"""Step catalog: index of existing step definitions."""
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from nl2gherkin.config import DEFAULT_FILE_PATTERNS
from nl2gherkin.errors import CatalogLoadError
from nl2gherkin.models import StepDefinition, StepKeyword
from nl2gherkin.normalizer import Normalizer


# Given("..."), @when('...'), Then(parsers.parse("...")) - but not promise.then("...")
DECLARATION_PATTERN = re.compile(
    r'(?<![\w.])(given|when|then)\s*\(\s*'
    r'(?:[\w.]+\s*\(\s*)?'
    r'(?:[rRuU]{1,2})?'
    r'(["\'])((?:\\.|(?!\2).)*)\2',
    re.IGNORECASE
)

PLACEHOLDER_PATTERN = re.compile(r'\{([^{}]*)\}')

# Cucumber expression parameter types
CUCUMBER_TYPES = {
    'string': r'"([^"]*)"',
    'int': r'(-?\d+)',
    'float': r'(-?\d*\.?\d+)',
    'word': r'([^\s]+)',
    '': r'(.*)',
}

# parse-module format specs used by Python step runners ({name:d})
PARSE_FORMATS = {
    'd': r'(-?\d+)',
    'f': r'(-?\d*\.?\d+)',
    'w': r'(\w+)',
}

MAX_SUGGESTIONS = 5

KeywordFilter = Optional[Union[StepKeyword, str]]


def expression_to_regex(pattern: str) -> "re.Pattern":
    """
    Convert a step pattern into an anchored, case-insensitive regex.

    Each placeholder becomes exactly one capturing group. Patterns that are
    already regular expressions (``^...$``) are compiled as they are.
    """
    if pattern.startswith('^') or pattern.endswith('$'):
        try:
            return re.compile('^' + pattern.lstrip('^').rstrip('$') + '$', re.IGNORECASE)
        except re.error:
            pass

    parts = []
    last = 0
    for match in PLACEHOLDER_PATTERN.finditer(pattern):
        parts.append(re.escape(pattern[last:match.start()]))
        parts.append(_placeholder_regex(match.group(1)))
        last = match.end()
    parts.append(re.escape(pattern[last:]))

    return re.compile('^' + ''.join(parts) + '$', re.IGNORECASE)


def _placeholder_regex(token: str) -> str:
    token = token.strip()
    if token in CUCUMBER_TYPES:
        return CUCUMBER_TYPES[token]
    if ':' in token:
        _, fmt = token.split(':', 1)
        return PARSE_FORMATS.get(fmt.strip(), r'(.+?)')
    return r'(.+?)'


def parse_step_source(content: str, source_file: str) -> List[StepDefinition]:
    """Find step declarations in a source file, whatever the surrounding code."""
    definitions = []
    for match in DECLARATION_PATTERN.finditer(content):
        keyword = StepKeyword.parse(match.group(1))
        pattern = re.sub(r'\\(["\'])', r'\1', match.group(3))
        line = content.count('\n', 0, match.start()) + 1
        definitions.append(StepDefinition(
            keyword=keyword,
            pattern=pattern,
            regex=expression_to_regex(pattern),
            source_file=source_file,
            line=line
        ))
    return definitions


def _resolve_keyword(keyword: KeywordFilter) -> Optional[StepKeyword]:
    if keyword is None:
        return None
    if isinstance(keyword, str):
        keyword = StepKeyword.parse(keyword)
    # And/But only make sense relative to a previous step
    if keyword is None or keyword.is_continuation:
        return None
    return keyword


class StepCatalog:
    """Read-only index of step definitions, in load order."""

    def __init__(self, definitions: Iterable[StepDefinition] = (),
                 sources: Sequence[str] = (), file_patterns: Optional[Sequence[str]] = None,
                 normalizer: Optional[Normalizer] = None):
        self._definitions = tuple(definitions)
        self.sources = tuple(str(s) for s in sources)
        self.file_patterns = tuple(file_patterns or DEFAULT_FILE_PATTERNS)
        self.normalizer = normalizer or Normalizer()

    @classmethod
    def load(cls, source_paths: Sequence[Union[str, Path]],
             file_patterns: Optional[Sequence[str]] = None,
             normalizer: Optional[Normalizer] = None,
             verbose: bool = False) -> "StepCatalog":
        """
        Load step definitions from files or directories.

        Args:
            source_paths: Step definition files or directories to scan
            file_patterns: Glob patterns applied inside directories
            normalizer: Normalizer used for similarity ranking
            verbose: Print a load summary

        Returns:
            A new StepCatalog

        Raises:
            CatalogLoadError: a path is missing or a file cannot be read
        """
        file_patterns = list(file_patterns or DEFAULT_FILE_PATTERNS)
        definitions: List[StepDefinition] = []
        file_count = 0

        def partial():
            return cls(definitions, source_paths, file_patterns, normalizer)

        for source in source_paths:
            source_path = Path(source)
            if source_path.is_dir():
                files = sorted({
                    f for pattern in file_patterns for f in source_path.glob(pattern) if f.is_file()
                })
            elif source_path.is_file():
                files = [source_path]
            else:
                raise CatalogLoadError(source_path, "path does not exist", partial=partial())

            for step_file in files:
                try:
                    content = step_file.read_text(encoding='utf-8')
                except (OSError, UnicodeDecodeError) as e:
                    raise CatalogLoadError(step_file, str(e), partial=partial()) from e
                definitions.extend(parse_step_source(content, str(step_file)))
                file_count += 1

        if verbose:
            print(f"Loaded {len(definitions)} step definitions from {file_count} files")

        return partial()

    def reload(self, verbose: bool = False) -> "StepCatalog":
        """Build a fresh catalog from the same sources."""
        return StepCatalog.load(self.sources, self.file_patterns, self.normalizer, verbose=verbose)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._definitions)

    def definitions(self, keyword: KeywordFilter = None) -> List[StepDefinition]:
        resolved = _resolve_keyword(keyword)
        if resolved is None:
            return list(self._definitions)
        return [d for d in self._definitions if d.keyword == resolved]

    def find_matching_step(self, text: str, keyword: KeywordFilter = None) -> Optional[StepDefinition]:
        """First definition whose pattern matches text end-to-end, or None."""
        for definition in self.definitions(keyword):
            if definition.match(text) is not None:
                return definition
        return None

    def suggest_steps(self, text: str, keyword: KeywordFilter = None,
                      limit: int = MAX_SUGGESTIONS) -> List[StepDefinition]:
        """Definitions sharing the most significant words with text."""
        query_words = self.normalizer.keywords(text)
        if not query_words:
            return []

        scored = []
        for definition in self.definitions(keyword):
            pattern_words = self.normalizer.normalize(definition.pattern).normalized_text.split()
            overlap = sum(
                1 for word in query_words
                if any(word in pattern_word for pattern_word in pattern_words)
            )
            if overlap > 0:
                scored.append((overlap, definition))

        # sort is stable, so equal scores keep catalog order
        scored.sort(key=lambda item: item[0], reverse=True)
        return [definition for _, definition in scored[:limit]]

    def patterns(self, keyword: KeywordFilter = None) -> List[str]:
        return [d.pattern for d in self.definitions(keyword)]

"""Step-definition stub generation for steps the catalog does not cover."""
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from nl2gherkin.catalog import parse_step_source
from nl2gherkin.emitter import unique_path
from nl2gherkin.models import Feature, StepDefinition, StepKeyword
from nl2gherkin.normalizer import QUOTED_PATTERN


NUMBER_PATTERN = re.compile(r'(?<![\w.])-?\d+(?!\w|\.\d)')

STUB_HEADER = '''"""Step stubs for: {title}

Generated for steps with no existing definition. Move implementations to
the appropriate step modules.
"""
from behave import given, when, then  # noqa: F401
'''

STUB_TEMPLATE = '''

@{decorator}('{pattern}')
def {name}({params}):
    raise NotImplementedError('STEP: {keyword} {display}')
'''


def step_pattern(text: str) -> Tuple[str, List[str]]:
    """
    Turn concrete step text into a parse-style pattern.

    Quoted literals become ``"{valueN}"`` and bare integers ``{numberN:d}``;
    literal braces are doubled.

    Returns:
        (pattern, parameter names)
    """
    params: List[str] = []
    parts = []
    last = 0

    def literal(segment):
        segment = segment.replace('{', '{{').replace('}', '}}')

        def number(match):
            name = f"number{sum(1 for p in params if p.startswith('number')) + 1}"
            params.append(name)
            return f"{{{name}:d}}"

        return NUMBER_PATTERN.sub(number, segment)

    for match in QUOTED_PATTERN.finditer(text):
        # only double quotes are Gherkin string arguments
        if match.group(1) is None:
            continue
        parts.append(literal(text[last:match.start()]))
        name = f"value{sum(1 for p in params if p.startswith('value')) + 1}"
        params.append(name)
        parts.append(f'"{{{name}}}"')
        last = match.end()
    parts.append(literal(text[last:]))

    return ''.join(parts), params


def function_name(pattern: str, taken: List[str]) -> str:
    base = 'step_' + (re.sub(r'[^a-z0-9]+', '_', re.sub(r'\{[^}]*\}', '', pattern.lower())).strip('_')[:60] or 'impl')
    name = base
    counter = 2
    while name in taken:
        name = f"{base}_{counter}"
        counter += 1
    return name


def _quote(text: str) -> str:
    return text.replace('\\', '\\\\').replace("'", "\\'")


class StubGenerator:
    """Writes behave-style step stubs for uncovered steps of a feature."""

    def __init__(self, step_stubs_dir: Union[str, Path]):
        self.step_stubs_dir = Path(step_stubs_dir)
        # definitions written by this generator, so later features reuse them
        self.generated: List[StepDefinition] = []

    def is_covered(self, text: str, catalog) -> bool:
        """True if the catalog or an already written stub defines the step."""
        if catalog is not None and catalog.find_matching_step(text) is not None:
            return True
        return any(definition.match(text) is not None for definition in self.generated)

    def missing_steps(self, feature: Feature, catalog) -> List[Tuple[StepKeyword, str]]:
        """Distinct (keyword, text) pairs with no matching definition, in feature order."""
        missing = []
        seen = set()
        for scenario in feature.scenarios:
            effective = StepKeyword.GIVEN
            for step in scenario.steps:
                if not step.keyword.is_continuation:
                    effective = step.keyword
                if self.is_covered(step.text, catalog):
                    continue
                pattern, _ = step_pattern(step.text)
                if pattern in seen:
                    continue
                seen.add(pattern)
                missing.append((effective, step.text))
        return missing

    def render(self, feature: Feature, catalog) -> Optional[str]:
        """
        Render a stub module for the feature's uncovered steps.

        Returns:
            Module source, or None when every step already has a definition
        """
        missing = self.missing_steps(feature, catalog)
        if not missing:
            return None

        chunks = [STUB_HEADER.format(title=feature.title.replace('"""', "'''"))]
        names: List[str] = []
        for keyword, text in missing:
            pattern, params = step_pattern(text)
            name = function_name(pattern, names)
            names.append(name)
            chunks.append(STUB_TEMPLATE.format(
                decorator=keyword.value.lower(),
                pattern=_quote(pattern),
                name=name,
                params=', '.join(['context'] + params),
                keyword=keyword.value,
                display=_quote(text)
            ))
        return ''.join(chunks)

    def save(self, feature: Feature, catalog, filename: Optional[str] = None) -> Optional[Path]:
        """Write the stub module; returns None when no stubs are needed."""
        content = self.render(feature, catalog)
        if content is None:
            return None

        self.step_stubs_dir.mkdir(parents=True, exist_ok=True)
        if filename:
            file_path = self.step_stubs_dir / filename
        else:
            file_path = unique_path(self.step_stubs_dir, feature.title, "_steps.py")
        file_path.write_text(content, encoding='utf-8')
        self.generated.extend(parse_step_source(content, str(file_path)))
        return file_path

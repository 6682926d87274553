"""Gherkin rendering and feature file persistence."""
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from nl2gherkin.models import Feature


def to_gherkin(feature: Feature) -> str:
    """Render a Feature as Gherkin text."""
    lines = []

    if feature.tags:
        lines.append(' '.join(feature.tags))

    lines.append(f"Feature: {feature.title}")
    if feature.description:
        for description_line in feature.description.split('\n'):
            lines.append(f"  {description_line}")

    for scenario in feature.scenarios:
        lines.append('')
        if scenario.tags:
            lines.append(f"  {' '.join(scenario.tags)}")
        lines.append(f"  Scenario: {scenario.title}")
        for step in scenario.steps:
            lines.append(f"    {step.keyword.value} {step.text}")

    return '\n'.join(lines) + '\n'


def sanitize(title: str) -> str:
    """Lowercase, strip non-alphanumerics and join words with underscores."""
    sanitized = re.sub(r'[^a-z0-9 ]', '', title.lower())
    return re.sub(r'\s+', '_', sanitized.strip()) or 'feature'


def timestamp() -> str:
    # Microseconds keep batch runs from reusing a name
    return datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")


def unique_path(directory: Path, title: str, suffix: str = ".feature") -> Path:
    """A timestamped path for title in directory that does not exist yet."""
    stem = f"{sanitize(title)}_{timestamp()}"
    path = directory / f"{stem}{suffix}"
    counter = 2
    while path.exists():
        path = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return path


class FeatureWriter:
    """Writes features as .feature files."""

    def __init__(self, features_dir: Union[str, Path]):
        self.features_dir = Path(features_dir)

    def save(self, feature: Feature, filename: Optional[str] = None) -> Path:
        """
        Save a feature to the features directory.

        Args:
            feature: Feature to write
            filename: File name; derived from the title when omitted

        Returns:
            Path of the written file
        """
        self.features_dir.mkdir(parents=True, exist_ok=True)

        if filename:
            file_path = self.features_dir / filename
        else:
            file_path = unique_path(self.features_dir, feature.title)
        file_path.write_text(to_gherkin(feature), encoding='utf-8')
        return file_path

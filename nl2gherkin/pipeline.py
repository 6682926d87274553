"""Main pipeline: description in, feature file (and step stubs) out."""
import time
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field

from nl2gherkin.emitter import FeatureWriter, to_gherkin
from nl2gherkin.errors import Nl2GherkinError
from nl2gherkin.feature_assembler import FeatureAssembler
from nl2gherkin.models import Feature
from nl2gherkin.stub_generator import StubGenerator


@dataclass
class TranslationResult:
    """Result of translating one description."""
    description: str
    feature: Optional[Feature]
    feature_path: Optional[Path]
    stub_path: Optional[Path]
    source: str  # template, mapped, llm, default or error
    reused_steps: int
    new_steps: int
    processing_time_ms: float
    notes: List[str] = field(default_factory=list)

    @property
    def total_steps(self) -> int:
        return self.reused_steps + self.new_steps


class TranslationPipeline:
    """Translates descriptions into Gherkin features."""

    def __init__(self, config, catalog, assembler: FeatureAssembler,
                 writer: Optional[FeatureWriter] = None,
                 stub_generator: Optional[StubGenerator] = None):
        self.config = config
        self.catalog = catalog
        self.assembler = assembler
        self.writer = writer
        self.stub_generator = stub_generator

    def translate(self, description: str, save: bool = True) -> TranslationResult:
        """
        Translate a single description.

        Args:
            description: Free-text test description
            save: Write the feature (and stubs) to disk

        Returns:
            TranslationResult for the description

        Raises:
            EmptyDescriptionError: description is empty
            CompletionError: the fallback could not reach the completion service
        """
        start_time = time.time()

        assembly = self.assembler.translate(description)
        feature = assembly.feature
        notes = list(assembly.notes)

        reused, new = self.count_reuse(feature)

        feature_path = None
        stub_path = None
        if save and self.writer is not None:
            feature_path = self.writer.save(feature)
            if self.stub_generator is not None and self.config.output.generate_stubs:
                stub_path = self.stub_generator.save(feature, self.catalog)
                if stub_path is None:
                    notes.append("All steps covered by existing definitions")

        processing_time = (time.time() - start_time) * 1000
        return TranslationResult(
            description=description,
            feature=feature,
            feature_path=feature_path,
            stub_path=stub_path,
            source=assembly.source,
            reused_steps=reused,
            new_steps=new,
            processing_time_ms=processing_time,
            notes=notes
        )

    def translate_safe(self, description: str, save: bool = True) -> TranslationResult:
        """Like translate, but records any pipeline error in the result instead of raising."""
        start_time = time.time()
        try:
            return self.translate(description, save=save)
        except (Nl2GherkinError, OSError) as e:
            processing_time = (time.time() - start_time) * 1000
            return TranslationResult(
                description=description,
                feature=None,
                feature_path=None,
                stub_path=None,
                source="error",
                reused_steps=0,
                new_steps=0,
                processing_time_ms=processing_time,
                notes=[f"Error: {str(e)}"]
            )

    def count_reuse(self, feature: Feature):
        """(steps matching an existing definition or earlier stub, steps that do not)."""
        reused = 0
        new = 0
        for scenario in feature.scenarios:
            for step in scenario.steps:
                if self._is_covered(step.text):
                    reused += 1
                else:
                    new += 1
        return reused, new

    def _is_covered(self, text: str) -> bool:
        if self.stub_generator is not None:
            return self.stub_generator.is_covered(text, self.catalog)
        return self.catalog is not None and self.catalog.find_matching_step(text) is not None

    def render(self, feature: Feature) -> str:
        return to_gherkin(feature)

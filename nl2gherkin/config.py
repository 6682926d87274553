"""Configuration loader and validator."""
import yaml
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field


DEFAULT_FILE_PATTERNS = ["**/*_steps.py", "**/steps.py", "**/*.steps.ts", "**/*.steps.js"]


@dataclass
class StepDefinitionsConfig:
    """Where existing step definitions live."""
    paths: List[str]
    file_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_PATTERNS))


@dataclass
class OutputConfig:
    """Generated artifact locations."""
    features_dir: str
    step_stubs_dir: str
    generate_stubs: bool = True


@dataclass
class CompletionConfig:
    """Text-completion service configuration."""
    model: str
    temperature: float
    max_tokens: int
    api_key_env: str = "OPENAI_API_KEY"
    base_url: Optional[str] = None
    timeout: Optional[float] = None


@dataclass
class FallbackConfig:
    """Fallback configuration."""
    enable_llm_synthesis: bool


@dataclass
class NormalizationConfig:
    """Text normalization configuration."""
    use_lemmatization: bool
    spacy_model: str = "en_core_web_sm"


@dataclass
class Config:
    """Main configuration class."""
    step_definitions: StepDefinitionsConfig
    output: OutputConfig
    completion: CompletionConfig
    fallbacks: FallbackConfig
    normalization: NormalizationConfig


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f) or {}

    return config_from_dict(config_dict)


def config_from_dict(config_dict: dict) -> Config:
    """Build a Config from an already parsed mapping."""
    steps = config_dict.get('step_definitions', {})
    output = config_dict.get('output', {})
    completion = config_dict.get('completion', {})
    fallbacks = config_dict.get('fallbacks', {})
    normalization = config_dict.get('normalization', {})

    paths = steps.get('paths', ['features/steps'])
    if isinstance(paths, str):
        paths = [paths]

    return Config(
        step_definitions=StepDefinitionsConfig(
            paths=list(paths),
            file_patterns=list(steps.get('file_patterns', DEFAULT_FILE_PATTERNS))
        ),
        output=OutputConfig(
            features_dir=output.get('features_dir', 'features/generated'),
            step_stubs_dir=output.get('step_stubs_dir', 'features/steps/generated'),
            generate_stubs=output.get('generate_stubs', True)
        ),
        completion=CompletionConfig(
            model=completion.get('model', 'gpt-4'),
            temperature=float(completion.get('temperature', 0.2)),
            max_tokens=int(completion.get('max_tokens', 1500)),
            api_key_env=completion.get('api_key_env', 'OPENAI_API_KEY'),
            base_url=completion.get('base_url'),
            timeout=completion.get('timeout')
        ),
        fallbacks=FallbackConfig(
            enable_llm_synthesis=fallbacks.get('enable_llm_synthesis', True)
        ),
        normalization=NormalizationConfig(
            use_lemmatization=normalization.get('use_lemmatization', False),
            spacy_model=normalization.get('spacy_model', 'en_core_web_sm')
        )
    )

"""Main entry point for the description to Gherkin translator."""
import argparse
from pathlib import Path
import sys
from datetime import datetime

from nl2gherkin.config import load_config
from nl2gherkin.errors import CatalogLoadError, Nl2GherkinError
from nl2gherkin.normalizer import Normalizer
from nl2gherkin.catalog import StepCatalog
from nl2gherkin.intent_extractor import IntentExtractor
from nl2gherkin.step_mapper import StepMapper
from nl2gherkin.completion import CompletionClient
from nl2gherkin.fallback import FallbackGenerator
from nl2gherkin.feature_assembler import FeatureAssembler
from nl2gherkin.emitter import FeatureWriter
from nl2gherkin.stub_generator import StubGenerator
from nl2gherkin.pipeline import TranslationPipeline
from nl2gherkin.batch_processor import BatchProcessor
from nl2gherkin.metrics import MetricsCalculator
from nl2gherkin.examples import ExampleGenerator, examples_table


def setup_pipeline(config, catalog=None, client=None, verbose=False):
    """Set up the translation pipeline."""
    normalizer = Normalizer(
        config.normalization.use_lemmatization,
        config.normalization.spacy_model
    )
    if catalog is None:
        catalog = StepCatalog.load(
            config.step_definitions.paths,
            config.step_definitions.file_patterns,
            normalizer=normalizer,
            verbose=verbose
        )

    extractor = IntentExtractor()
    mapper = StepMapper(catalog)
    fallback = FallbackGenerator(client or CompletionClient(config.completion), config, mapper)
    assembler = FeatureAssembler(extractor, mapper, catalog, fallback)

    pipeline = TranslationPipeline(
        config, catalog, assembler,
        writer=FeatureWriter(config.output.features_dir),
        stub_generator=StubGenerator(config.output.step_stubs_dir)
    )

    return pipeline, normalizer


def translate_description(config, description, examples=None, verbose=False):
    """Translate a single description and report the written files."""
    pipeline, _ = setup_pipeline(config, verbose=verbose)

    result = pipeline.translate(description)

    print(f"\n{'='*60}")
    print(f"Feature: {result.feature.title}")
    print(f"{'='*60}")
    print(pipeline.render(result.feature))
    print(f"Source: {result.source}")
    print(f"Steps reused: {result.reused_steps} | new: {result.new_steps}")
    print(f"Feature file: {result.feature_path}")
    if result.stub_path:
        print(f"Step stubs: {result.stub_path}")
    if examples:
        rows = ExampleGenerator(CompletionClient(config.completion), config).generate(
            result.feature.scenarios[0], examples
        )
        if rows:
            print(examples_table(rows))
        else:
            print("No parameters to generate examples for")
    for note in result.notes:
        print(f"Note: {note}")
    print(f"{'='*60}\n")


def process_batch(config, input_file, output_file=None, metrics_output=None, limit=None, verbose=False):
    """Translate every description of a file."""
    pipeline, normalizer = setup_pipeline(config, verbose=verbose)

    batch_processor = BatchProcessor(pipeline, normalizer, verbose=verbose)

    # Create timestamped output directory
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    output_dir = Path("output") / timestamp
    output_dir.mkdir(parents=True, exist_ok=True)

    output_file = str(output_dir / (Path(output_file).name if output_file else "results.csv"))
    metrics_output = str(output_dir / (Path(metrics_output).name if metrics_output else "metrics.json"))

    print(f"\n{'='*60}")
    print(f"Output Directory: {output_dir}")
    print(f"{'='*60}\n")

    results = batch_processor.process_file(input_file, output_file, limit=limit)

    metrics_calc = MetricsCalculator()
    report = metrics_calc.calculate(results)
    metrics_calc.save_report(report, metrics_output)
    print(f"\nMetrics saved to {metrics_output}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Natural language to Gherkin feature generator")
    parser.add_argument("--config", default="config.yaml", help="Path to config file")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-d", "--description", help="Test description to translate")
    source.add_argument("-f", "--file", help="File with one description per line")
    parser.add_argument("-o", "--output", help="Directory for generated feature files")
    parser.add_argument("-s", "--steps", action="append",
                        help="Step definition file or directory (repeatable)")
    parser.add_argument("-m", "--model", help="Completion model to use")
    parser.add_argument("--no-stubs", action="store_true", help="Do not write step stubs")
    parser.add_argument("--results", help="CSV results log name for batch mode")
    parser.add_argument("--metrics", help="Output file for metrics report")
    parser.add_argument("--limit", type=int, help="Limit number of descriptions to process")
    parser.add_argument("-e", "--examples", type=int,
                        help="Print N example data rows for the scenario parameters (single description)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print load details and progress")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.output:
        config.output.features_dir = args.output
    if args.steps:
        config.step_definitions.paths = args.steps
    if args.model:
        config.completion.model = args.model
    if args.no_stubs:
        config.output.generate_stubs = False

    if args.file and not Path(args.file).is_file():
        print(f"Error: input file not found: {args.file}")
        sys.exit(1)

    try:
        if args.description:
            translate_description(config, args.description, args.examples, args.verbose)
        else:
            process_batch(config, args.file, args.results, args.metrics, args.limit, args.verbose)
    except (CatalogLoadError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Nl2GherkinError as e:
        print(f"Error: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()

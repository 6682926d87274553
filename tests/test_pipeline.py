"""Tests for the translation pipeline, batch processing and metrics."""
import csv
import json

import pytest

from nl2gherkin.batch_processor import BatchProcessor
from nl2gherkin.catalog import StepCatalog
from nl2gherkin.errors import CompletionError, EmptyDescriptionError
from nl2gherkin.metrics import MetricsCalculator
from nl2gherkin.pipeline import TranslationPipeline

from main import setup_pipeline


@pytest.fixture
def pipeline(config, catalog, fake_client):
    pipeline, _ = setup_pipeline(config, catalog=catalog, client=fake_client)
    return pipeline


def test_translate_writes_feature_and_stubs(pipeline, config):
    result = pipeline.translate('Go to "/shop" and click "Buy". Then I should see "Thank you"')

    assert result.source == "mapped"
    assert result.feature_path.exists()
    assert result.feature_path.read_text(encoding="utf-8") == pipeline.render(result.feature)
    assert result.reused_steps == 3
    assert result.new_steps == 0
    assert result.stub_path is None
    assert "All steps covered by existing definitions" in result.notes
    assert result.processing_time_ms >= 0


def test_uncovered_steps_get_stubs(pipeline):
    result = pipeline.translate("take a screenshot of the basket")

    assert result.new_steps == 1
    assert result.stub_path is not None
    assert "take a screenshot of the basket" in result.stub_path.read_text(encoding="utf-8")


def test_stubs_can_be_disabled(pipeline, config):
    config.output.generate_stubs = False

    result = pipeline.translate("take a screenshot of the basket")

    assert result.feature_path is not None
    assert result.stub_path is None


def test_translate_without_saving(pipeline, config, tmp_path):
    result = pipeline.translate("I want to register a new account", save=False)

    assert result.source == "template"
    assert result.feature_path is None
    assert not (tmp_path / "features").exists()


def test_translate_raises_pipeline_errors(pipeline, fake_client):
    fake_client.error = CompletionError("offline")

    with pytest.raises(EmptyDescriptionError):
        pipeline.translate("  ")
    with pytest.raises(CompletionError):
        pipeline.translate("...")


def test_translate_safe_records_errors(pipeline, fake_client):
    fake_client.error = CompletionError("offline")

    result = pipeline.translate_safe("...")

    assert result.source == "error"
    assert result.feature is None
    assert "offline" in result.notes[0]


def test_batch_processing(pipeline, fake_client, tmp_path):
    fake_client.error = CompletionError("offline")
    input_file = tmp_path / "descriptions.txt"
    input_file.write_text(
        "1. Go to \"/home\" and click \"Start\"\n"
        "\n"
        "- ...\n"
        "Step 3: register a new account\n",
        encoding="utf-8"
    )
    output_file = tmp_path / "out" / "results.csv"

    processor = BatchProcessor(pipeline, verbose=False)
    results = processor.process_file(str(input_file), str(output_file))

    assert [r.description for r in results] == ['Go to "/home" and click "Start"', "...", "register a new account"]
    assert [r.source for r in results] == ["mapped", "error", "template"]

    with open(output_file, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["source"] for row in rows] == ["mapped", "error", "template"]
    assert rows[2]["feature_title"] == "User Registration"


def test_batch_reuses_stubs_written_earlier_in_the_run(pipeline, config, tmp_path):
    """A step stubbed for one description is not stubbed again for the next."""
    input_file = tmp_path / "descriptions.txt"
    input_file.write_text(
        "the cart keeps its items\n"
        "the cart keeps its items. Verify \"ok\"\n",
        encoding="utf-8"
    )

    results = BatchProcessor(pipeline, verbose=False).process_file(str(input_file))

    assert results[0].stub_path is not None
    assert results[1].stub_path is None
    assert results[1].new_steps == 0
    assert results[1].reused_steps == 2

    stubs = StepCatalog.load([config.output.step_stubs_dir])
    assert stubs.patterns().count("the cart keeps its items") == 1


def test_batch_limit(pipeline, tmp_path):
    input_file = tmp_path / "descriptions.txt"
    input_file.write_text("click \"A\"\nclick \"B\"\nclick \"C\"\n", encoding="utf-8")

    results = BatchProcessor(pipeline, verbose=False).process_file(str(input_file), limit=2)

    assert len(results) == 2


def test_metrics_report(pipeline, fake_client, tmp_path):
    fake_client.error = CompletionError("offline")
    results = [
        pipeline.translate_safe('Go to "/home" and click "Start"'),
        pipeline.translate_safe("take a screenshot"),
        pipeline.translate_safe("..."),
    ]

    calculator = MetricsCalculator()
    report = calculator.calculate(results)

    assert report.total_descriptions == 3
    assert report.source_distribution["mapped"]["count"] == 2
    assert report.source_distribution["error"]["count"] == 1
    assert report.step_reuse["reused_steps"] == 2
    assert report.step_reuse["new_steps"] == 1
    assert report.steps_per_feature["max"] == 2.0

    output = tmp_path / "metrics.json"
    calculator.save_report(report, str(output))
    saved = json.loads(output.read_text())
    assert saved["total_descriptions"] == 3
    assert "processing_time_ms" in saved["latency"]


def test_metrics_of_empty_run():
    report = MetricsCalculator().calculate([])

    assert report.total_descriptions == 0
    assert report.step_reuse["reuse_rate"] == 0.0
    assert report.latency == {}

"""Batch processing of description files."""
import csv
from typing import List, Optional
from pathlib import Path
from collections import Counter
from tqdm import tqdm

from nl2gherkin.normalizer import Normalizer
from nl2gherkin.pipeline import TranslationPipeline, TranslationResult


class BatchProcessor:
    """Translates every description of a file, one feature per description."""

    def __init__(self, pipeline: TranslationPipeline, normalizer: Optional[Normalizer] = None,
                 verbose: bool = True):
        self.pipeline = pipeline
        self.normalizer = normalizer or Normalizer()
        self.verbose = verbose

    def read_descriptions(self, input_path: str) -> List[str]:
        """One description per non-blank line, list numbering removed."""
        with open(input_path, 'r', encoding='utf-8-sig') as f:
            lines = [self.normalizer.clean_description_line(line) for line in f]
        return [line for line in lines if line]

    def process_file(self, input_path: str, output_path: Optional[str] = None,
                     limit: Optional[int] = None) -> List[TranslationResult]:
        """
        Translate the descriptions of a newline-delimited file.

        A description that fails is logged with source "error" and the
        batch carries on.

        Args:
            input_path: Text file, one description per line
            output_path: Optional CSV results log
            limit: Optional limit on number of descriptions to process
        """
        descriptions = self.read_descriptions(input_path)
        total = len(descriptions)
        if limit:
            descriptions = descriptions[:limit]

        if self.verbose:
            print(f"\n{'='*60}")
            print(f"Total descriptions in file: {total}")
            if limit:
                print(f"Processing limit: {limit} descriptions")
            print(f"Processing {len(descriptions)} descriptions from: {input_path}")
            print(f"{'='*60}\n")

        results = []
        source_counts = Counter()

        pbar = tqdm(total=len(descriptions), desc="Translating",
                    unit="feature", ncols=100, disable=not self.verbose,
                    bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]')

        for description in descriptions:
            result = self.pipeline.translate_safe(description)
            results.append(result)
            source_counts[result.source] += 1

            pbar.update(1)
            pbar.set_postfix({'source': result.source, 'steps': result.total_steps})

            if result.source == "error" and self.verbose:
                tqdm.write(f"  [Error] {description[:60]}: {'; '.join(result.notes)}")

        pbar.close()

        if output_path:
            self._write_results_csv(results, output_path)

        if self.verbose:
            print(f"\n{'='*60}")
            print("PROCESSING COMPLETE")
            print(f"{'='*60}")
            print(f"\nTotal descriptions processed: {len(results)}")
            print(f"\nSource Distribution:")
            for source, count in sorted(source_counts.items()):
                pct = (count / len(results) * 100) if results else 0
                print(f"  {source}: {count} ({pct:.1f}%)")
            if output_path:
                print(f"\nResults saved to: {output_path}")

        return results

    def _write_results_csv(self, results: List[TranslationResult], output_path: str):
        """Write results to CSV file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            fieldnames = [
                'description', 'source', 'feature_title', 'feature_path', 'stub_path',
                'reused_steps', 'new_steps', 'processing_time_ms', 'notes'
            ]

            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()

            for result in results:
                writer.writerow({
                    'description': result.description,
                    'source': result.source,
                    'feature_title': result.feature.title if result.feature else '',
                    'feature_path': str(result.feature_path) if result.feature_path else '',
                    'stub_path': str(result.stub_path) if result.stub_path else '',
                    'reused_steps': result.reused_steps,
                    'new_steps': result.new_steps,
                    'processing_time_ms': result.processing_time_ms,
                    'notes': '; '.join(result.notes)
                })

"""Metrics calculation module."""
import json
from typing import List, Dict, Any
from collections import Counter
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
import numpy as np

from nl2gherkin.pipeline import TranslationResult


@dataclass
class MetricsReport:
    """Metrics report data."""
    run_timestamp: str
    total_descriptions: int
    source_distribution: Dict[str, Dict[str, float]]
    step_reuse: Dict[str, Any]
    steps_per_feature: Dict[str, float]
    latency: Dict[str, Dict[str, float]]


def _summary(values: List[float]) -> Dict[str, float]:
    if not values:
        return {}
    return {
        "mean": float(np.mean(values)),
        "median": float(np.median(values)),
        "min": float(np.min(values)),
        "max": float(np.max(values)),
    }


class MetricsCalculator:
    """Calculates metrics from batch results."""

    def calculate(self, results: List[TranslationResult]) -> MetricsReport:
        """Calculate metrics from results."""
        total = len(results)

        source_counts = Counter(r.source for r in results)
        source_distribution = {
            source: {
                "count": count,
                "percentage": (count / total * 100) if total > 0 else 0.0
            }
            for source, count in source_counts.items()
        }

        # Failed descriptions produce no steps
        translated = [r for r in results if r.feature is not None]
        reused = int(np.sum([r.reused_steps for r in translated])) if translated else 0
        new = int(np.sum([r.new_steps for r in translated])) if translated else 0
        step_reuse = {
            "reused_steps": reused,
            "new_steps": new,
            "reuse_rate": (reused / (reused + new) * 100) if (reused + new) > 0 else 0.0
        }

        steps_per_feature = _summary([r.total_steps for r in translated])

        processing_times = [r.processing_time_ms for r in results]
        latency = {}
        if processing_times:
            latency["processing_time_ms"] = dict(
                _summary(processing_times),
                p95=float(np.percentile(processing_times, 95))
            )
            latency["total_time_seconds"] = {"sum": float(np.sum(processing_times) / 1000.0)}

        return MetricsReport(
            run_timestamp=datetime.now(timezone.utc).isoformat(),
            total_descriptions=total,
            source_distribution=source_distribution,
            step_reuse=step_reuse,
            steps_per_feature=steps_per_feature,
            latency=latency
        )

    def save_report(self, report: MetricsReport, output_path: str):
        """Save metrics report to JSON file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(asdict(report), f, indent=2)

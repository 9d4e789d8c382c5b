#!/usr/bin/env python3
"""
Compare detected steps with ground truth taps.

Reads detections.jsonl and ground_truth.jsonl from a recording session, pairs
each tapped step with the closest detected step and reports precision, recall
and the overall count error.
"""

import json
import argparse
from pathlib import Path
from typing import List, Dict, Tuple, Optional
from dataclasses import dataclass

from evaluation import recording_config as config


@dataclass
class StepEvent:
    """A step event (detection or ground truth)."""
    timestamp: float
    source: str  # 'detection' or 'peer'
    sample_index: Optional[int] = None


@dataclass
class MatchResult:
    """Result of matching a ground truth event with detections."""
    ground_truth: StepEvent
    matched_detection: Optional[StepEvent] = None
    time_diff: Optional[float] = None


def _read_jsonl(path: Path) -> List[Dict]:
    if not path.exists():
        print(f"Warning: {path.name} not found in {path.parent}")
        return []

    with open(path, 'r') as f:
        return [json.loads(line) for line in f if line.strip()]


def load_detections(session_dir: Path) -> List[StepEvent]:
    """Load detected steps from detections.jsonl, sorted by time."""
    events = [
        StepEvent(timestamp=data['timestamp'], source='detection', sample_index=data.get('sample_index'))
        for data in _read_jsonl(session_dir / config.DETECTIONS_FILENAME)
        if data.get('type') == 'step'
    ]
    return sorted(events, key=lambda e: e.timestamp)


def load_ground_truth(session_dir: Path) -> List[StepEvent]:
    """Load tapped steps from ground_truth.jsonl, sorted by time."""
    events = [
        StepEvent(timestamp=data['timestamp'], source=data.get('source', 'peer'))
        for data in _read_jsonl(session_dir / config.GROUND_TRUTH_FILENAME)
    ]
    return sorted(events, key=lambda e: e.timestamp)


def match_events(
    detections: List[StepEvent],
    ground_truth: List[StepEvent],
    match_window: float = config.DEFAULT_MATCH_WINDOW,
    offset: float = 0.0
) -> Tuple[List[MatchResult], List[StepEvent], int, int, int]:
    """Match ground truth steps with detections within a time window.

    Each detection can match at most one ground truth step.

    Args:
        detections: Detected steps
        ground_truth: Tapped steps
        match_window: Time window for matching (±seconds)
        offset: Time offset applied to ground truth (seconds)

    Returns:
        Tuple of (matched_results, unmatched_detections, TP, FP, FN)
    """
    matched_results = []
    used_detections = set()

    for gt in ground_truth:
        gt = StepEvent(timestamp=gt.timestamp + offset, source=gt.source)
        best_idx = None
        best_time_diff = None

        for idx, det in enumerate(detections):
            if idx in used_detections:
                continue

            time_diff = det.timestamp - gt.timestamp
            if abs(time_diff) <= match_window and (best_idx is None or abs(time_diff) < abs(best_time_diff)):
                best_idx = idx
                best_time_diff = time_diff

        if best_idx is not None:
            used_detections.add(best_idx)
            matched_results.append(MatchResult(gt, detections[best_idx], best_time_diff))
        else:
            matched_results.append(MatchResult(ground_truth=gt))

    unmatched_detections = [det for idx, det in enumerate(detections) if idx not in used_detections]

    true_positives = sum(1 for mr in matched_results if mr.matched_detection is not None)
    false_negatives = len(matched_results) - true_positives
    false_positives = len(unmatched_detections)

    return matched_results, unmatched_detections, true_positives, false_positives, false_negatives


def calculate_metrics(tp: int, fp: int, fn: int) -> Dict[str, float]:
    """Calculate precision, recall, F1 score and relative count error."""
    precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
    f1 = 2 * (precision * recall) / (precision + recall) if (precision + recall) > 0 else 0.0

    # Detected total vs true total, regardless of timing
    true_total = tp + fn
    detected_total = tp + fp
    count_error = (detected_total - true_total) / true_total if true_total > 0 else 0.0

    return {
        'precision': precision,
        'recall': recall,
        'f1_score': f1,
        'count_error': count_error
    }


def generate_report(
    session_dir: Path,
    matched_results: List[MatchResult],
    unmatched_detections: List[StepEvent],
    tp: int,
    fp: int,
    fn: int,
    metrics: Dict[str, float],
    match_window: float,
    offset: float
) -> str:
    """Generate a markdown report of the comparison."""
    report = []
    report.append("# Step Detection Comparison Report\n")
    report.append(f"**Session**: `{session_dir.name}`\n")
    report.append(f"**Match Window**: ±{match_window}s\n")
    report.append(f"**Time Offset**: {offset:+.3f}s\n")
    report.append("")

    report.append("## Summary Metrics\n")
    report.append(f"- **Precision**: {metrics['precision']:.2%} ({tp}/{tp+fp} detected steps were real)")
    report.append(f"- **Recall**: {metrics['recall']:.2%} ({tp}/{tp+fn} tapped steps were detected)")
    report.append(f"- **F1 Score**: {metrics['f1_score']:.3f}")
    report.append(f"- **Count Error**: {metrics['count_error']:+.2%} ({tp+fp} detected vs {tp+fn} tapped)")
    report.append("")

    successful_matches = [mr for mr in matched_results if mr.matched_detection is not None]
    if successful_matches:
        time_diffs = [mr.time_diff for mr in successful_matches]
        avg_diff = sum(time_diffs) / len(time_diffs)
        report.append(f"**Average Time Difference**: {avg_diff:+.3f}s")
        report.append("")

    missed = [mr for mr in matched_results if mr.matched_detection is None]
    if missed:
        report.append("## Missed Steps\n")
        report.append("| Time |")
        report.append("|------|")
        for mr in missed:
            report.append(f"| {mr.ground_truth.timestamp:6.3f}s |")
        report.append("")

    if unmatched_detections:
        report.append("## Extra Detections\n")
        report.append("| Time | Sample |")
        report.append("|------|--------|")
        for det in unmatched_detections:
            sample = det.sample_index if det.sample_index is not None else "N/A"
            report.append(f"| {det.timestamp:6.3f}s | {sample} |")
        report.append("")

    report.append("## Tuning Suggestions\n")
    if missed and not unmatched_detections:
        report.append("- **Missed steps only**: lower the threshold or raise the maximum pulse duration.")
    elif unmatched_detections and not missed:
        report.append("- **Extra detections only**: raise the threshold or the minimum step interval.")
    elif missed and unmatched_detections:
        if successful_matches and abs(avg_diff) > 0.1:
            report.append(f"- **Systematic Time Offset**: Average difference is {avg_diff:+.3f}s. "
                          f"Try using `--offset {offset + avg_diff:.3f}`")
        report.append("- **Both missed and extra steps**: review the window size and the tapping accuracy.")
    else:
        report.append("- **Perfect Detection**: every tapped step matched one detection.")
    report.append("")

    return "\n".join(report)


def main():
    """Main entry point for the comparison script."""
    parser = argparse.ArgumentParser(description="Compare detected steps with ground truth taps")
    parser.add_argument("--session", type=Path, required=True,
                        help="Session directory containing detections.jsonl and ground_truth.jsonl")
    parser.add_argument("--match-window", type=float, default=config.DEFAULT_MATCH_WINDOW,
                        help=f"Time window for matching in seconds (default: {config.DEFAULT_MATCH_WINDOW})")
    parser.add_argument("--offset", type=float, default=0.0,
                        help="Time offset applied to ground truth in seconds (default: 0.0)")
    parser.add_argument("--output", type=Path, help="Output file for report (default: print to console)")

    args = parser.parse_args()

    if not args.session.exists():
        print(f"Error: Session directory not found: {args.session}")
        return 1

    print(f"Loading data from {args.session}...")
    detections = load_detections(args.session)
    ground_truth = load_ground_truth(args.session)
    print(f"Loaded {len(detections)} detected steps and {len(ground_truth)} tapped steps")

    if not ground_truth:
        print("Error: No ground truth data found. Cannot perform comparison.")
        return 1

    matched_results, unmatched_detections, tp, fp, fn = match_events(
        detections, ground_truth, match_window=args.match_window, offset=args.offset
    )
    metrics = calculate_metrics(tp, fp, fn)
    report = generate_report(args.session, matched_results, unmatched_detections,
                             tp, fp, fn, metrics, args.match_window, args.offset)

    if args.output:
        args.output.write_text(report)
        print(f"\nReport saved to: {args.output}")
    else:
        print("\n" + "=" * 80)
        print(report)
        print("=" * 80)

    print(f"\n✓ Precision: {metrics['precision']:.2%}")
    print(f"✓ Recall: {metrics['recall']:.2%}")
    print(f"✓ Count error: {metrics['count_error']:+.2%}")

    return 0


if __name__ == "__main__":
    exit(main())

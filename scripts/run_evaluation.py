#!/usr/bin/env python3
"""Run evaluation pipeline"""
import asyncio
import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from jobrec.evaluation import HoldoutSplitter, RecommendationEvaluator
from jobrec.recommendation import EngineSettings, SqlInteractionStore
from jobrec.sample_data import generate_sample_snapshot
from jobrec.utils import config, logger


async def main():
    parser = argparse.ArgumentParser(description="Run leave-one-out evaluation")
    parser.add_argument("--database-url", help="Evaluate on a store instead of synthetic data")
    parser.add_argument("--num-candidates", type=int, default=50)
    parser.add_argument("--num-jobs", type=int, default=40)
    parser.add_argument("--k", type=int, default=5)
    parser.add_argument("--output", help="Output JSON file", default="output/evaluation_report.json")
    args = parser.parse_args()

    if args.database_url:
        snapshot = SqlInteractionStore(args.database_url).fetch_snapshot()
    else:
        logger.info(f"Generating synthetic data for {args.num_candidates} candidates")
        snapshot = generate_sample_snapshot(num_candidates=args.num_candidates, num_jobs=args.num_jobs)

    training, ground_truth = HoldoutSplitter.leave_one_out(snapshot)
    logger.info(f"Held out one application for {len(ground_truth)} candidates")

    evaluator = RecommendationEvaluator.from_snapshot(training, EngineSettings.from_config())
    try:
        report = await evaluator.run_evaluation(ground_truth, k=args.k, batch_size=config.batch_size)
    finally:
        evaluator.engine.close()

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    logger.info(f"✓ Evaluation report saved to {output_path}")
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    asyncio.run(main())

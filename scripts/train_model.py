#!/usr/bin/env python3
"""Train the skill matching model from application history"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from jobrec.recommendation import SqlInteractionStore
from jobrec.skill_matching import prepare_training_data, train_match_model
from jobrec.utils import config, logger


def main():
    parser = argparse.ArgumentParser(description="Train the skill matching model")
    parser.add_argument("--database-url", default=config.database_url)
    parser.add_argument("--model-path", default=config.model_path)
    parser.add_argument("--max-iter", type=int, default=200)
    args = parser.parse_args()

    snapshot = SqlInteractionStore(args.database_url).fetch_snapshot()
    inputs, outputs = prepare_training_data(snapshot.applications, snapshot.candidates, snapshot.jobs)
    logger.info(f"Prepared {len(outputs)} training examples ({int(outputs.sum())} positive)")

    model = train_match_model(inputs, outputs, max_iter=args.max_iter)
    if model is None:
        logger.error("Training skipped: need both positive and negative applications")
        sys.exit(1)
    model.save(args.model_path)


if __name__ == "__main__":
    main()

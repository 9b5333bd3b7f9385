#!/usr/bin/env python3
"""Initialize the interaction store with sample job-board data"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from jobrec.recommendation import SqlInteractionStore
from jobrec.sample_data import generate_sample_snapshot
from jobrec.utils import config, logger


def clean_database(store: SqlInteractionStore):
    """Drop existing tables"""
    logger.info("Cleaning database...")
    with store.engine.begin() as conn:
        for table in ("saved_jobs", "applications", "jobs", "candidates"):
            conn.execute(text(f"DROP TABLE IF EXISTS {table}"))
    logger.info("✓ Database cleaned")


def seed(store: SqlInteractionStore, num_candidates: int, num_jobs: int):
    snapshot = generate_sample_snapshot(num_candidates=num_candidates, num_jobs=num_jobs)

    for job in snapshot.jobs:
        store.add_job(job)
    for candidate in snapshot.candidates:
        store.add_candidate(candidate)
    for application in snapshot.applications:
        store.add_application(application)
    for saved in snapshot.saved_jobs:
        for job_id in saved.job_ids:
            store.save_job(saved.candidate_id, job_id)

    logger.info(
        f"✓ Seeded {len(snapshot.jobs)} jobs, {len(snapshot.candidates)} candidates, "
        f"{len(snapshot.applications)} applications"
    )


def main():
    parser = argparse.ArgumentParser(description="Initialize the interaction store")
    parser.add_argument("--database-url", default=config.database_url)
    parser.add_argument("--num-candidates", type=int, default=50)
    parser.add_argument("--num-jobs", type=int, default=40)
    parser.add_argument("--clean", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    store = SqlInteractionStore(args.database_url)
    if args.clean:
        clean_database(store)
    store.create_schema()
    seed(store, args.num_candidates, args.num_jobs)
    store.engine.dispose()


if __name__ == "__main__":
    main()

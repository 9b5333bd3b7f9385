#!/usr/bin/env python3
"""Generate job recommendations"""
import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from jobrec.recommendation import RecommendationEngine, SqlInteractionStore
from jobrec.skill_matching import SkillMatcher
from jobrec.utils import config, logger

def main():
    parser = argparse.ArgumentParser(description="Generate job recommendations")
    parser.add_argument("--candidate-id", required=True, help="Candidate ID")
    parser.add_argument("--limit", type=int, default=10, help="Number of recommendations")
    parser.add_argument("--database-url", default=config.database_url, help="Interaction store URL")
    parser.add_argument("--mode", choices=["hybrid", "skills", "trending"], default="hybrid")
    parser.add_argument("--output", help="Output JSON file")
    args = parser.parse_args()

    store = SqlInteractionStore(args.database_url)

    if args.mode == "skills":
        recommendations = SkillMatcher(store).get_job_recommendations(args.candidate_id, args.limit)
    else:
        engine = RecommendationEngine(store)
        if not engine.initialize():
            logger.error("Failed to build recommendation index")
            sys.exit(1)
        if args.mode == "trending":
            recommendations = engine.get_trending_jobs(args.limit)
        else:
            recommendations = engine.get_personalized_recommendations(args.candidate_id, args.limit)

    output = {
        "candidate_id": args.candidate_id,
        "mode": args.mode,
        "recommendations": [rec.model_dump(mode="json", exclude={"job"}) for rec in recommendations],
    }

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(output, f, indent=2)
        logger.info(f"✓ Saved recommendations to {args.output}")
    else:
        print(json.dumps(output, indent=2))

if __name__ == "__main__":
    main()

"""Batch recommendation generation with concurrency"""
import json
import time
from pathlib import Path
from typing import List, Dict, Optional
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from .recommendation.engine import RecommendationEngine
from .utils import logger


@dataclass
class BatchResult:
    """Result of recommending for a single candidate"""
    candidate_id: str
    success: bool
    matching_time: float
    num_recommendations: int
    error: Optional[str] = None


class BatchRecommender:
    """Generate recommendations for many candidates against one published index"""

    def __init__(self, engine: RecommendationEngine, max_workers: int = 10, output_dir: str = None):
        self.engine = engine
        self.max_workers = max_workers
        self.output_dir = Path(output_dir) if output_dir else None

    def process_single(self, candidate_id: str, limit: int = None) -> BatchResult:
        """Recommend for one candidate and optionally write the result as JSON"""
        start = time.time()
        try:
            recommendations = self.engine.get_personalized_recommendations(candidate_id, limit)
            elapsed = time.time() - start

            if self.output_dir is not None:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                payload = {
                    "candidate_id": candidate_id,
                    "recommendations": [rec.model_dump(mode="json", exclude={"job"}) for rec in recommendations],
                }
                with open(self.output_dir / f"{candidate_id}.json", "w") as f:
                    json.dump(payload, f, indent=2)

            return BatchResult(
                candidate_id=candidate_id,
                success=True,
                matching_time=elapsed,
                num_recommendations=len(recommendations),
            )

        except Exception as e:
            logger.error(f"Error recommending for {candidate_id}: {e}")
            return BatchResult(
                candidate_id=candidate_id,
                success=False,
                matching_time=time.time() - start,
                num_recommendations=0,
                error=str(e),
            )

    def process_batch(self, candidate_ids: List[str], limit: int = None) -> Dict:
        """Recommend for many candidates concurrently"""
        logger.info(f"Recommending for {len(candidate_ids)} candidates with {self.max_workers} workers")

        if not self.engine.is_initialized:
            self.engine.initialize()

        start_time = time.time()
        results = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_id = {
                executor.submit(self.process_single, candidate_id, limit): candidate_id
                for candidate_id in candidate_ids
            }

            for future in as_completed(future_to_id):
                result = future.result()
                results.append(result)
                if result.success:
                    logger.info(f"✓ {result.candidate_id}: "
                                f"Match={result.matching_time:.3f}s, "
                                f"Recs={result.num_recommendations}")
                else:
                    logger.error(f"✗ {result.candidate_id}: {result.error}")

        total_time = time.time() - start_time

        successful = [r for r in results if r.success]
        failed = [r for r in results if not r.success]

        avg_match = sum(r.matching_time for r in successful) / len(successful) if successful else 0
        throughput = len(successful) / (total_time / 60) if total_time > 0 else 0.0

        summary = {
            "total_candidates": len(candidate_ids),
            "successful": len(successful),
            "failed": len(failed),
            "total_time_seconds": round(total_time, 2),
            "avg_matching_time_seconds": round(avg_match, 3),
            "throughput_candidates_per_minute": round(throughput, 2),
            "results": [
                {
                    "candidate_id": r.candidate_id,
                    "success": r.success,
                    "matching_time": round(r.matching_time, 3),
                    "num_recommendations": r.num_recommendations,
                    "error": r.error
                }
                for r in sorted(results, key=lambda r: r.candidate_id)
            ]
        }

        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(self.output_dir / "batch_summary.json", "w") as f:
                json.dump(summary, f, indent=2)

        logger.info(f"Batch complete: {len(successful)}/{len(candidate_ids)} succeeded in {total_time:.2f}s")

        return summary

"""Offline evaluation of the hybrid recommender"""
import asyncio
import time
from typing import Dict, List, Set, Tuple
from dataclasses import dataclass
import pandas as pd

from .metrics import MetricsCalculator
from ..recommendation.database import InMemoryInteractionStore
from ..recommendation.engine import EngineSettings, RecommendationEngine
from ..recommendation.matrix import status_weight
from ..recommendation.models import ApplicationRecord, InteractionSnapshot, SavedJobs
from ..utils import logger


@dataclass
class EvalResult:
    """Single evaluation result"""
    candidate_id: str
    latency: float
    precision: float
    recall: float
    f1: float
    ndcg: float
    hit_rate: float
    reciprocal_rank: float


class HoldoutSplitter:
    """Split interaction history into training data and ground truth"""

    @staticmethod
    def leave_one_out(
        snapshot: InteractionSnapshot,
        min_applications: int = 2,
    ) -> Tuple[InteractionSnapshot, Dict[str, Set[str]]]:
        """
        Hold out each candidate's strongest application.

        Candidates with fewer than ``min_applications`` applications keep
        their full history and get no ground truth. A held-out job is also
        removed from that candidate's saved jobs.
        """
        by_candidate: Dict[str, List[ApplicationRecord]] = {}
        for app in snapshot.applications:
            by_candidate.setdefault(app.candidate_id, []).append(app)

        held_out: Dict[str, ApplicationRecord] = {}
        for candidate_id, apps in by_candidate.items():
            if len(apps) < min_applications:
                continue
            # max keeps the first of equal weights, so reverse to prefer the latest
            held_out[candidate_id] = max(reversed(apps), key=lambda app: status_weight(app.status))

        training_apps = [
            app for app in snapshot.applications
            if held_out.get(app.candidate_id) is not app
        ]
        training_saved = [
            SavedJobs(
                candidate_id=saved.candidate_id,
                job_ids=[
                    job_id for job_id in saved.job_ids
                    if saved.candidate_id not in held_out or held_out[saved.candidate_id].job_id != job_id
                ],
            )
            for saved in snapshot.saved_jobs
        ]

        training = InteractionSnapshot(
            candidates=snapshot.candidates,
            jobs=snapshot.jobs,
            applications=training_apps,
            saved_jobs=training_saved,
        )
        ground_truth = {candidate_id: {app.job_id} for candidate_id, app in held_out.items()}
        return training, ground_truth


class RecommendationEvaluator:
    """Evaluate recommendation system"""

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine
        self.results: List[EvalResult] = []

    @classmethod
    def from_snapshot(cls, snapshot: InteractionSnapshot, settings: EngineSettings = None) -> "RecommendationEvaluator":
        """Engine over an in-memory copy of the snapshot, built up front"""
        engine = RecommendationEngine(InMemoryInteractionStore.from_snapshot(snapshot), settings=settings)
        engine.initialize()
        return cls(engine)

    async def evaluate_single(
        self,
        candidate_id: str,
        ground_truth: Set[str],
        k: int = 5
    ) -> EvalResult:
        """Evaluate single candidate"""
        start = time.time()

        try:
            recommendations = await asyncio.to_thread(
                self.engine.get_personalized_recommendations, candidate_id, k
            )
            recommended_ids = [rec.job_id for rec in recommendations[:k]]
            latency = time.time() - start

            calc = MetricsCalculator()
            precision = calc.precision_at_k(recommended_ids, ground_truth, k)
            recall = calc.recall_at_k(recommended_ids, ground_truth, k)

            return EvalResult(
                candidate_id=candidate_id,
                latency=latency,
                precision=precision,
                recall=recall,
                f1=calc.f1_score(precision, recall),
                ndcg=calc.ndcg_at_k(recommended_ids, ground_truth, k),
                hit_rate=calc.hit_rate_at_k(recommended_ids, ground_truth, k),
                reciprocal_rank=calc.mean_reciprocal_rank(recommended_ids, ground_truth),
            )

        except Exception as e:
            logger.error(f"Error evaluating {candidate_id}: {e}")
            return EvalResult(
                candidate_id=candidate_id,
                latency=time.time() - start,
                precision=0.0,
                recall=0.0,
                f1=0.0,
                ndcg=0.0,
                hit_rate=0.0,
                reciprocal_rank=0.0,
            )

    async def run_evaluation(
        self,
        ground_truth: Dict[str, Set[str]],
        k: int = 5,
        batch_size: int = 20
    ) -> Dict:
        """Run full evaluation"""
        logger.info(f"Starting evaluation on {len(ground_truth)} candidates")

        start_time = time.time()
        items = list(ground_truth.items())

        for i in range(0, len(items), batch_size):
            batch = items[i:i + batch_size]
            tasks = [
                self.evaluate_single(candidate_id, truth, k)
                for candidate_id, truth in batch
            ]
            batch_results = await asyncio.gather(*tasks)
            self.results.extend(batch_results)

            logger.info(f"Completed batch {i//batch_size + 1}/{(len(items)-1)//batch_size + 1}")

        total_time = time.time() - start_time

        return self.generate_report(total_time, k)

    def generate_report(self, total_time: float, k: int = 5) -> Dict:
        """Generate evaluation report"""
        if not self.results:
            return {"total_samples": 0, "total_time_sec": round(total_time, 2)}

        df = pd.DataFrame([vars(r) for r in self.results])

        def summary(column: str) -> Dict[str, float]:
            return {
                "mean": round(float(df[column].mean()), 4),
                "std": round(float(df[column].std(ddof=0)), 4),
            }

        return {
            "total_samples": len(df),
            "total_time_sec": round(total_time, 2),
            "quality_metrics": {
                f"precision@{k}": summary("precision"),
                f"recall@{k}": summary("recall"),
                "f1_score": summary("f1"),
                f"ndcg@{k}": summary("ndcg"),
                f"hit_rate@{k}": summary("hit_rate"),
                "mrr": summary("reciprocal_rank"),
            },
            "performance_metrics": {
                "avg_latency_sec": round(float(df['latency'].mean()), 4),
                "p50_latency_sec": round(float(df['latency'].quantile(0.50)), 4),
                "p95_latency_sec": round(float(df['latency'].quantile(0.95)), 4),
                "throughput_req_per_sec": round(len(df) / total_time, 2) if total_time > 0 else 0.0
            }
        }

#!/usr/bin/env python3
"""Main entry point for the job recommendation engine demo"""
from rich.console import Console
from rich.table import Table

from jobrec.recommendation import EngineSettings, InMemoryInteractionStore, RecommendationEngine
from jobrec.sample_data import generate_sample_snapshot
from jobrec.utils import logger, monitor

console = Console()

def display_recommendations(candidate_id: str, recommendations):
    """Display recommendations in a table"""
    table = Table(title=f"Job Recommendations for {candidate_id}")
    table.add_column("Rank", style="cyan", width=6)
    table.add_column("Job", style="magenta")
    table.add_column("Final", style="yellow", width=8)
    table.add_column("Content", style="green", width=8)
    table.add_column("Collab.", style="blue", width=8)
    table.add_column("Reasons")

    for i, rec in enumerate(recommendations, 1):
        table.add_row(
            str(i),
            f"{rec.job.title} ({rec.job_id})" if rec.job else rec.job_id,
            f"{rec.final_score:.2f}",
            f"{rec.content_score:.2f}",
            f"{rec.collaborative_score:.2f}",
            "; ".join(rec.reasons),
        )

    console.print(table)

def main():
    """Main workflow"""
    console.print("[bold blue]Job Recommendation Engine[/bold blue]\n")

    logger.info("Generating sample job board data")
    snapshot = generate_sample_snapshot()
    engine = RecommendationEngine(InMemoryInteractionStore.from_snapshot(snapshot), EngineSettings())

    console.print("[yellow]Building recommendation index...[/yellow]")
    engine.initialize()

    for candidate_id in ["candidate_0", "candidate_1"]:
        display_recommendations(candidate_id, engine.get_personalized_recommendations(candidate_id, 5))

    console.print("\n[cyan]Recording interactions for candidate_0...[/cyan]")
    engine.update_user_interaction("candidate_0", "job_002", "view")
    engine.update_user_interaction("candidate_0", "job_002", "apply")
    display_recommendations("candidate_0", engine.get_personalized_recommendations("candidate_0", 5))

    console.print("\n[cyan]Trending this week:[/cyan]")
    for item in engine.get_trending_jobs(limit=5):
        console.print(f"  {item.job_id}: score={item.score:.1f} ({item.interaction_count} applications)")

    console.print("\n[cyan]Similar to job_001:[/cyan]")
    for job_id, score in engine.get_similar_jobs("job_001", limit=3):
        console.print(f"  {job_id}: {score:.2f}")

    console.print(engine.status().model_dump_json(indent=2))
    console.print(monitor.get_report())
    engine.close()

if __name__ == "__main__":
    main()

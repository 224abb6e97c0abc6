"""
Pipeline Registry and Exports

Provides a registry of all available pipelines and helper functions
for running them by name.
"""

from datetime import date
from typing import Any, Optional, Type

from core.logging import get_logger
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.player_game_logs import PlayerGameLogsPipeline
from pipelines.player_season_averages import PlayerSeasonAveragesPipeline
from schemas.pipeline import PipelineResult
from schemas.common import ApiStatus


# Registry of all available pipelines
# Order matters for run_all_pipelines - dependencies should come first
PIPELINE_REGISTRY: dict[str, Type[BasePipeline]] = {
    "player_game_logs": PlayerGameLogsPipeline,
    # Reads player_game_logs
    "player_season_averages": PlayerSeasonAveragesPipeline,
}


def get_pipeline(name: str, **options: Any) -> BasePipeline:
    """
    Get a pipeline instance by name.

    Args:
        name: Pipeline name (e.g., "player_season_averages")
        **options: Passed to the pipeline constructor

    Returns:
        Instantiated pipeline

    Raises:
        KeyError: If pipeline name not found
    """
    if name not in PIPELINE_REGISTRY:
        available = ", ".join(PIPELINE_REGISTRY.keys())
        raise KeyError(f"Unknown pipeline '{name}'. Available: {available}")

    return PIPELINE_REGISTRY[name](**options)


async def run_pipeline(
    name: str,
    date_override: Optional[date] = None,
    **options: Any,
) -> PipelineResult:
    """
    Run a pipeline by name.

    Args:
        name: Pipeline name
        date_override: If provided, the pipeline uses this date instead of
                       computing from the current time. Useful for backfills.
        **options: Passed to the pipeline constructor

    Returns:
        PipelineResult with status and details
    """
    pipeline = get_pipeline(name, **options)
    return await pipeline.run(date_override=date_override)


async def run_all_pipelines(date_override: Optional[date] = None) -> dict[str, PipelineResult]:
    """
    Run all pipelines in registration order: game logs, then season averages.

    Returns:
        Dict mapping pipeline name to PipelineResult
    """
    log = get_logger("pipeline").bind(operation="run_all")

    results = {}
    pipeline_names = list(PIPELINE_REGISTRY.keys())

    log.info("all_pipelines_started", count=len(pipeline_names))

    for i, name in enumerate(pipeline_names, 1):
        log.info("running_pipeline", pipeline=name, step=f"{i}/{len(pipeline_names)}")
        results[name] = await run_pipeline(name, date_override=date_override)

    success_count = sum(1 for r in results.values() if r.status == ApiStatus.SUCCESS)
    log.info(
        "all_pipelines_completed",
        success_count=success_count,
        total_count=len(results),
    )

    return results


def list_pipelines() -> list[dict]:
    """List all available pipelines with their configurations."""
    return [cls.get_info() for cls in PIPELINE_REGISTRY.values()]


__all__ = [
    "BasePipeline",
    "PipelineConfig",
    "PipelineContext",
    "PlayerGameLogsPipeline",
    "PlayerSeasonAveragesPipeline",
    "PIPELINE_REGISTRY",
    "get_pipeline",
    "run_pipeline",
    "run_all_pipelines",
    "list_pipelines",
]

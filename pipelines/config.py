"""
Pipeline Configuration

Immutable configuration dataclass for pipeline metadata.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable configuration for a pipeline.

    Attributes:
        name: Internal name used for tracking (e.g., "player_season_averages")
        display_name: Human-readable name (e.g., "Player Season Averages")
        description: What this pipeline does
        target_table: Primary table this pipeline writes to
        depends_on: Pipeline names whose output this pipeline reads
    """

    name: str
    display_name: str
    description: str
    target_table: str

    depends_on: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate configuration."""
        if not self.name:
            raise ValueError("Pipeline name is required")
        if not self.target_table:
            raise ValueError("Pipeline target_table is required")

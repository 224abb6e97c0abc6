"""
Category Z-Score Transformer

Standardizes each player's per-game rates against the league population and
sums the nine category z-scores into a single ranking value.

League mean and standard deviation are population statistics (divide by N)
over qualified players only. Every player, qualified or not, is scored
against that population. Turnovers are negated since fewer is better.
"""

import statistics
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from pipelines.transformers.averages import (
    GameLogRow,
    PlayerAggregate,
    aggregate_player_games,
)

DEFAULT_MIN_GAMES = 5


@dataclass(frozen=True)
class Category:
    """A ranking category: where its value lives and where its z-score goes."""

    key: str
    field: str
    z_field: str
    negate: bool = False


CATEGORIES: tuple[Category, ...] = (
    Category("points", "points_per_game", "points_z"),
    Category("rebounds", "rebounds_per_game", "rebounds_z"),
    Category("assists", "assists_per_game", "assists_z"),
    Category("steals", "steals_per_game", "steals_z"),
    Category("blocks", "blocks_per_game", "blocks_z"),
    Category("three_pointers", "three_pointers_per_game", "three_pointers_z"),
    Category("fg_percentage", "field_goal_percentage", "fg_percentage_z"),
    Category("ft_percentage", "free_throw_percentage", "ft_percentage_z"),
    Category("turnovers", "turnovers_per_game", "turnovers_z", negate=True),
)

CATEGORY_KEYS = tuple(category.key for category in CATEGORIES)

# Categories reported back as league averages after a run
SUMMARY_CATEGORIES = ("points", "rebounds", "assists", "steals", "blocks")


@dataclass(frozen=True)
class CategoryStats:
    """Population mean and standard deviation of one category."""

    mean: float = 0.0
    std_dev: float = 0.0


@dataclass
class SeasonAveragesResult:
    """Output of one season-averages computation."""

    season: str
    players: list[dict] = field(default_factory=list)
    league_stats: dict[str, CategoryStats] = field(default_factory=dict)
    qualified_count: int = 0
    min_games: int = DEFAULT_MIN_GAMES

    @property
    def players_processed(self) -> int:
        return len(self.players)

    def league_averages(self) -> dict[str, float]:
        """Mean of the headline categories (0 when nothing qualified)."""
        return {
            key: self.league_stats.get(key, CategoryStats()).mean
            for key in SUMMARY_CATEGORIES
        }


def calculate_category_stats(values: Sequence[float]) -> CategoryStats:
    """
    Population mean and standard deviation of values.

    An empty population yields mean 0 and standard deviation 0. Identical
    values yield a standard deviation of exactly 0.
    """
    if not values:
        return CategoryStats()
    return CategoryStats(
        mean=float(statistics.mean(values)),
        std_dev=float(statistics.pstdev(values)),
    )


def calculate_z_score(value: float, mean: float, std_dev: float) -> float:
    """(value - mean) / std_dev, or 0 when std_dev is 0."""
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def is_qualified(aggregate: PlayerAggregate, min_games: int) -> bool:
    return aggregate["games_played"] >= min_games


def compute_league_stats(
    aggregates: Iterable[PlayerAggregate],
    min_games: int = DEFAULT_MIN_GAMES,
) -> dict[str, CategoryStats]:
    """
    League statistics per category over qualified players.

    Args:
        aggregates: Per-player season averages
        min_games: Minimum games played to enter the population

    Returns:
        Mapping of category key to CategoryStats
    """
    qualified = [a for a in aggregates if is_qualified(a, min_games)]
    return {
        category.key: calculate_category_stats([a[category.field] for a in qualified])
        for category in CATEGORIES
    }


def score_player(
    aggregate: PlayerAggregate,
    league_stats: dict[str, CategoryStats],
    min_games: int = DEFAULT_MIN_GAMES,
) -> dict:
    """Attach the nine signed z-scores and total_value to a player's averages."""
    scored = dict(aggregate)
    total_value = 0.0
    for category in CATEGORIES:
        stats = league_stats[category.key]
        z = calculate_z_score(aggregate[category.field], stats.mean, stats.std_dev)
        if category.negate:
            z = -z
        scored[category.z_field] = z
        total_value += z

    scored["total_value"] = total_value
    scored["qualified"] = is_qualified(aggregate, min_games)
    return scored


def score_players(
    aggregates: list[PlayerAggregate],
    min_games: int = DEFAULT_MIN_GAMES,
) -> tuple[list[dict], dict[str, CategoryStats]]:
    """
    Score every player against the qualified population.

    Returns:
        (scored players in input order, league stats per category)
    """
    league_stats = compute_league_stats(aggregates, min_games)
    scored = [score_player(a, league_stats, min_games) for a in aggregates]
    return scored, league_stats


def adjusted_value(player: dict, punt: Iterable[str] = ()) -> float:
    """Sum of z-scores excluding punted categories."""
    punted = set(punt)
    return sum(
        player[category.z_field]
        for category in CATEGORIES
        if category.key not in punted
    )


def validate_punt(punt: Iterable[str]) -> tuple[str, ...]:
    """Reject unknown category keys."""
    punt = tuple(punt)
    unknown = [key for key in punt if key not in CATEGORY_KEYS]
    if unknown:
        raise ValueError(
            f"Unknown categories {unknown}. Available: {', '.join(CATEGORY_KEYS)}"
        )
    return punt


def rank_players(players: Iterable[dict], punt: Iterable[str] = ()) -> list[dict]:
    """
    Order players best first and number them.

    The ranking key is total_value, or the sum of non-punted z-scores when
    punt is given. Equal keys are ordered by player_id ascending.

    Args:
        players: Scored player dicts (with *_z fields and total_value)
        punt: Category keys to leave out of the ranking key

    Returns:
        New dicts with "rank" (1 = best) and, when punting, "adjusted_value"
    """
    punt = validate_punt(punt)

    ranked = []
    for player in players:
        entry = dict(player)
        if punt:
            entry["adjusted_value"] = adjusted_value(player, punt)
        ranked.append(entry)

    value_key = "adjusted_value" if punt else "total_value"
    ranked.sort(key=lambda p: (-p[value_key], p["player_id"]))

    for rank, entry in enumerate(ranked, start=1):
        entry["rank"] = rank
    return ranked


def calculate_player_averages(
    rows: Iterable[GameLogRow],
    season: str,
    min_games: int = DEFAULT_MIN_GAMES,
    player_ids: Optional[Iterable[int]] = None,
) -> SeasonAveragesResult:
    """
    Full season computation: averages, league stats, z-scores, total value.

    An empty input produces a result with no players.

    Args:
        rows: Game rows for the season
        season: Season label (e.g. "2025-26")
        min_games: Minimum games to enter the league population
        player_ids: Optional allow-list of player IDs

    Returns:
        SeasonAveragesResult with players in first-seen order
    """
    aggregates = aggregate_player_games(rows, player_ids)
    if not aggregates:
        return SeasonAveragesResult(season=season, min_games=min_games)

    scored, league_stats = score_players(aggregates, min_games)
    return SeasonAveragesResult(
        season=season,
        players=scored,
        league_stats=league_stats,
        qualified_count=sum(1 for p in scored if p["qualified"]),
        min_games=min_games,
    )

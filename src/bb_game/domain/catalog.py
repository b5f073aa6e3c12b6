"""Static game-type catalog. Read-only; entries are frozen dataclasses."""

from decimal import Decimal

from src.bb_common.enums import GameType
from src.bb_common.errors import ConfigNotFoundError
from src.bb_game.domain.models import GameConfig

GAME_CONFIGS: tuple[GameConfig, ...] = (
    GameConfig(
        id="speed-bingo",
        name="Speed Bingo",
        entry_fee=Decimal("5.00"),
        min_players=3,
        max_players=20,
        game_type=GameType.BINGO,
        duration_minutes=5,
    ),
    GameConfig(
        id="classic-bingo",
        name="Classic Bingo",
        entry_fee=Decimal("5.00"),
        min_players=5,
        max_players=30,
        game_type=GameType.BINGO,
        duration_minutes=10,
    ),
    GameConfig(
        id="high-stakes-arena",
        name="High Stakes Arena",
        entry_fee=Decimal("10.00"),
        min_players=8,
        max_players=50,
        game_type=GameType.BINGO,
        duration_minutes=15,
    ),
    GameConfig(
        id="daily-tournament",
        name="Daily Tournament",
        entry_fee=Decimal("8.00"),
        min_players=10,
        max_players=100,
        game_type=GameType.TOURNAMENT,
        duration_minutes=30,
    ),
    GameConfig(
        id="weekly-championship",
        name="Weekly Championship",
        entry_fee=Decimal("20.00"),
        min_players=20,
        max_players=200,
        game_type=GameType.TOURNAMENT,
        duration_minutes=60,
    ),
)

_BY_ID: dict[str, GameConfig] = {c.id: c for c in GAME_CONFIGS}


def get_game_config(config_id: str) -> GameConfig:
    config = _BY_ID.get(config_id)
    if config is None:
        raise ConfigNotFoundError(config_id)
    return config


def list_game_configs() -> list[GameConfig]:
    return list(GAME_CONFIGS)

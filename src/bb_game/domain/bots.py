"""Synthetic players used to pad a roster up to a game's minimum size.

Display names are <Name><1..999> drawn at random; collisions between bots
are allowed and not deduplicated. Ids are snowflake-based and unique.
"""

import random

from src.bb_common.id_generator import generate_id
from src.bb_game.domain.models import GameConfig, Player

BOT_NAMES: tuple[str, ...] = (
    "LuckyPlayer", "BingoMaster", "CardShark", "NumberHunter",
    "QuickDraw", "BingoPro", "LuckyDuck", "NumberNinja",
    "BingoKing", "CardQueen", "LuckyStar", "BingoBoss",
    "NumberWizard", "CardMaster", "LuckyCharm", "BingoBeast",
)


def generate_bot_player(game_config: GameConfig, rng: random.Random | None = None) -> Player:
    source = rng or random
    name = source.choice(BOT_NAMES)
    suffix = source.randint(1, 999)
    return Player(
        id=generate_id("bot"),
        username=f"{name}{suffix}",
        entry_fee=game_config.entry_fee,
        is_bot=True,
    )


def generate_bot_players(
    count: int, game_config: GameConfig, rng: random.Random | None = None
) -> list[Player]:
    """Return `count` bots paying the config's entry fee; count <= 0 -> []."""
    return [generate_bot_player(game_config, rng) for _ in range(max(count, 0))]

"""Prize pool split and prize assignment.

Pool split (per session):
  platform_cut = total_entry_fees * 0.10
  payout_pool  = total_entry_fees * 0.90
  tiers        = payout_pool * (0.60, 0.25, 0.15) for places 1/2/3

Decimal rates sum to exactly 1, so platform_cut + payout_pool == total and
first + second + third == payout_pool hold without rounding drift.
"""

import random
from collections.abc import Callable, Sequence
from dataclasses import replace
from decimal import Decimal

from src.bb_common.money import PAYOUT_RATE, PLATFORM_FEE_RATE, ZERO
from src.bb_game.domain.models import GameConfig, Player, PrizeDistribution

FIRST_PLACE_RATE = Decimal("0.60")
SECOND_PLACE_RATE = Decimal("0.25")
THIRD_PLACE_RATE = Decimal("0.15")

RankingStrategy = Callable[[Sequence[Player]], list[Player]]


def calculate_prize_distribution(
    players: Sequence[Player], game_config: GameConfig
) -> PrizeDistribution:
    """Split the roster's entry fees. An empty roster yields an all-zero distribution.

    game_config is accepted for parity with callers that price by config; the
    split itself only depends on what each player actually paid.
    """
    total = sum((p.entry_fee for p in players), ZERO)
    payout_pool = total * PAYOUT_RATE
    return PrizeDistribution(
        total_entry_fees=total,
        platform_cut=total * PLATFORM_FEE_RATE,
        payout_pool=payout_pool,
        first_place=payout_pool * FIRST_PLACE_RATE,
        second_place=payout_pool * SECOND_PLACE_RATE,
        third_place=payout_pool * THIRD_PLACE_RATE,
    )


def rank_by_score(players: Sequence[Player]) -> list[Player]:
    """Score descending; sorted() is stable so ties keep join order."""
    return sorted(players, key=lambda p: -p.score)


def random_ranking(rng: random.Random | None = None) -> RankingStrategy:
    """Legacy placeholder ranking: uniform shuffle. Not a performance ranking."""
    source = rng or random.Random()

    def _shuffle(players: Sequence[Player]) -> list[Player]:
        shuffled = list(players)
        source.shuffle(shuffled)
        return shuffled

    return _shuffle


def distribute_prizes(
    players: Sequence[Player],
    distribution: PrizeDistribution,
    ranking: RankingStrategy | None = None,
) -> list[Player]:
    """Return new player records in finishing order with position and prize set.

    Places 1-3 receive the tier amounts; everyone else gets position 0 and
    prize 0. With fewer than three players the unfilled tiers are not paid.
    Inputs are never mutated.
    """
    ordered = (ranking or rank_by_score)(players)
    tiers = distribution.tiers
    result: list[Player] = []
    for index, player in enumerate(ordered):
        if index < len(tiers):
            result.append(replace(player, position=index + 1, prize=tiers[index]))
        else:
            result.append(replace(player, position=0, prize=ZERO))
    return result

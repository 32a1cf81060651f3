"""Snake draft ordering."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from fairway.models import DraftSlot, GolferScore, Pick


class DraftError(ValueError):
    """Raised when a pick does not fit the draft order."""


def snake_draft_order(players: Sequence[str], picks_per_player: int) -> List[DraftSlot]:
    """Forward order on even rounds, reversed on odd rounds."""

    order: List[DraftSlot] = []
    count = len(players)
    for round_idx in range(picks_per_player):
        sequence = list(players) if round_idx % 2 == 0 else list(reversed(players))
        for position, player in enumerate(sequence):
            order.append(DraftSlot(player=player, pick=round_idx * count + position + 1, round=round_idx))
    return order


def current_drafter(order: Sequence[DraftSlot], picks_made: int) -> Optional[str]:
    """Player on the clock, or None once the draft is complete."""

    if picks_made < 0:
        raise DraftError(f"picks_made cannot be negative: {picks_made}")
    if picks_made >= len(order):
        return None
    return order[picks_made].player


def available_golfers(
    scores: Iterable[GolferScore],
    picks: Iterable[Pick],
    *,
    search: str = "",
) -> List[GolferScore]:
    taken = {pick.golfer_name.strip().lower() for pick in picks}
    needle = search.strip().lower()
    return [
        golfer
        for golfer in scores
        if golfer.key not in taken and needle in golfer.key
    ]

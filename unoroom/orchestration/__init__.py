"""Game orchestration."""

from unoroom.orchestration.game_runner import GameResult, GameRunner
from unoroom.orchestration.soak import SoakReport, check_invariants, run_soak

__all__ = ["GameResult", "GameRunner", "SoakReport", "check_invariants", "run_soak"]

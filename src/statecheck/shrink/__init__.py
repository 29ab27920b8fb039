from statecheck.shrink.candidates import iter_candidates
from statecheck.shrink.search import ShrinkResult, replay_path, shrink_sequence

__all__ = ["ShrinkResult", "iter_candidates", "replay_path", "shrink_sequence"]

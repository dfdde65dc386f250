"""
Solution Planner - personal command centre.

Keeps an offline-first incubator of ideas, a shared real-time tree of
attention items (with notes, documents, photos and links), and merges
read-only tracker snapshots into one board.
"""

__version__ = "0.4.0"

# Re-export core models for convenience
from planner.core.config.models import PlannerConfig
from planner.core.ideas.models import Idea, IdeaPriority, IdeaStage

__all__ = ["PlannerConfig", "Idea", "IdeaPriority", "IdeaStage", "__version__"]

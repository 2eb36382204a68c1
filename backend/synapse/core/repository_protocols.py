"""Boundary Protocols — contracts between the engine and its external collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Collaborators are injected into services; none are constructed by core

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - SkillExtractor returns raw candidates only; alias folding happens in
      core/skill_normalization.py so every caller normalizes the same way
    - RefreshNotifier.schedule_refresh is sync and returns immediately: callers
      must never await the recommender inside (or after) a unit of work
"""

from typing import Protocol


class SkillExtractor(Protocol):
    """Text-analysis collaborator — finds skill names in free text."""
    async def extract_skills(self, text: str) -> list[str]: ...
    async def extract_proficiencies(
        self, text: str, known_skills: list[str],
    ) -> dict[str, str]: ...


class RefreshNotifier(Protocol):
    """Recommendation collaborator — best-effort model refresh signal."""
    def schedule_refresh(self) -> object: ...

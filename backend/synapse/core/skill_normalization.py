"""Skill Normalization — alias folding and proficiency coercion for skill input.

Invariants:
    - Alias lookup is case-insensitive (alias_map keys are lowercase)
    - Unknown names are title-cased; output is de-duplicated, first occurrence wins
    - Blank names are dropped
    - coerce_proficiency never raises: anything unrecognized becomes beginner

Design Decisions:
    - Normalization is pure and lives in core: the alias map is loaded by the shell
      (services/skill_resolver.load_alias_map) and passed in
    - Beginner as the fallback level: the safest claim to make about an unverified skill
"""

from collections.abc import Iterable, Mapping

from synapse.core.domain_types import ProficiencyLevel


def normalize_skill_names(
    raw_names: Iterable[str], alias_map: Mapping[str, str],
) -> list[str]:
    """Map raw candidate names onto canonical skill names."""
    seen: set[str] = set()
    normalized: list[str] = []
    for raw in raw_names:
        lookup = raw.strip().lower()
        if not lookup:
            continue
        canonical = alias_map.get(lookup) or lookup.title()
        key = canonical.lower()
        if key in seen:
            continue
        seen.add(key)
        normalized.append(canonical)
    return normalized


def coerce_proficiency(value: str | None) -> ProficiencyLevel:
    """Return a valid ProficiencyLevel, defaulting to beginner."""
    if isinstance(value, ProficiencyLevel):
        return value
    if value is None:
        return ProficiencyLevel.BEGINNER
    try:
        return ProficiencyLevel(str(value).strip().lower())
    except ValueError:
        return ProficiencyLevel.BEGINNER


def coerce_proficiencies(
    skills: Mapping[str, str | None],
) -> dict[str, ProficiencyLevel]:
    return {name: coerce_proficiency(level) for name, level in skills.items()}

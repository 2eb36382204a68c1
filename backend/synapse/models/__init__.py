"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Referential actions (CASCADE / SET NULL) declared on every foreign key

Design Decisions:
    - One file per entity for locality
    - No ORM relationship() graphs: services traverse with explicit queries inside
      a unit of work, so async lazy loads can never fire
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from synapse.models.team import Team  # noqa: F401
from synapse.models.user import User  # noqa: F401
from synapse.models.skill import Skill, SkillAlias  # noqa: F401
from synapse.models.user_skill import UserSkill  # noqa: F401
from synapse.models.project import Project  # noqa: F401
from synapse.models.task import Task  # noqa: F401
from synapse.models.task_required_skill import TaskRequiredSkill  # noqa: F401
from synapse.models.invitation import Invitation  # noqa: F401

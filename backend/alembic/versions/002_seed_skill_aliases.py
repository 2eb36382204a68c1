"""Seed curated skills and their common aliases.

Revision ID: 002_seed_skill_aliases
Revises: 001_initial
Create Date: 2026-10-17

Curated skills are verified. Aliases are stored lowercase; lookup in
core/skill_normalization.py lowercases the input before matching.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_seed_skill_aliases"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# canonical skill -> aliases
_SKILLS: dict[str, list[str]] = {
    "JavaScript": ["js", "javascript", "es6", "ecmascript"],
    "TypeScript": ["ts", "typescript"],
    "Python": ["py", "python3"],
    "Go": ["golang"],
    "Java": [],
    "C#": ["csharp", "c sharp"],
    "C++": ["cpp"],
    "Rust": [],
    "React": ["reactjs", "react.js"],
    "Vue.js": ["vue", "vuejs"],
    "Next.js": ["nextjs", "next"],
    "Node.js": ["node", "nodejs"],
    "Django REST Framework": ["drf"],
    "FastAPI": [],
    "Flask": [],
    "PostgreSQL": ["postgres", "psql", "pg"],
    "MongoDB": ["mongo"],
    "Redis": [],
    "MySQL": [],
    "Kubernetes": ["k8s", "kube"],
    "Docker": [],
    "AWS": ["amazon web services"],
    "Google Cloud Platform": ["gcp", "google cloud"],
    "Microsoft Azure": ["azure"],
    "CI/CD": ["cicd", "ci cd", "continuous integration"],
    "Terraform": ["tf"],
    "GitHub Actions": ["gha"],
    "Scikit-learn": ["sklearn", "scikit learn"],
    "TensorFlow": ["tf2"],
    "PyTorch": ["torch"],
    "Pandas": ["pd"],
    "NumPy": ["np"],
}


def upgrade() -> None:
    skills = sa.table(
        "skills",
        sa.column("id", sa.BigInteger),
        sa.column("skill_name", sa.String),
        sa.column("is_verified", sa.Boolean),
    )
    aliases = sa.table(
        "skill_aliases",
        sa.column("alias_name", sa.String),
        sa.column("skill_id", sa.BigInteger),
    )
    conn = op.get_bind()
    for name, alias_names in _SKILLS.items():
        skill_id = conn.execute(
            sa.select(skills.c.id).where(
                sa.func.lower(skills.c.skill_name) == name.lower()
            )
        ).scalar()
        if skill_id is None:
            skill_id = conn.execute(
                skills.insert()
                .values(skill_name=name, is_verified=True)
                .returning(skills.c.id)
            ).scalar_one()
        else:
            conn.execute(
                skills.update()
                .where(skills.c.id == skill_id)
                .values(is_verified=True)
            )
        if alias_names:
            op.bulk_insert(aliases, [
                {"alias_name": alias, "skill_id": skill_id} for alias in alias_names
            ])


def downgrade() -> None:
    op.execute(
        sa.text("DELETE FROM skill_aliases WHERE alias_name IN :names")
        .bindparams(sa.bindparam(
            "names", expanding=True,
            value=[a for names in _SKILLS.values() for a in names],
        ))
    )

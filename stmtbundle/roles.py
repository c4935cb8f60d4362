"""
Recognized statement bundle files.

The role table decides which archive members are analyzed, in which order,
and which questions the model is asked about each of them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class RoleSpec:
    """A recognized bundle file and its role-specific instruction."""

    name: str
    instruction: str = ""


@dataclass(frozen=True)
class RoleTable:
    """
    Immutable, ordered table of recognized bundle files.

    Iteration order is selection order. Names are matched exactly
    against archive member paths (case-sensitive, no normalization).
    """

    roles: tuple[RoleSpec, ...]

    def __post_init__(self):
        names = [role.name for role in self.roles]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate role names in table: {names}")

    def __iter__(self) -> Iterator[RoleSpec]:
        return iter(self.roles)

    def __len__(self) -> int:
        return len(self.roles)

    def __contains__(self, name: object) -> bool:
        return any(role.name == name for role in self.roles)

    def names(self) -> list[str]:
        """Role names in selection order."""
        return [role.name for role in self.roles]

    def __getitem__(self, name: str) -> RoleSpec:
        role = self.get(name)
        if role is None:
            raise KeyError(name)
        return role

    def get(self, name: str) -> RoleSpec | None:
        """Look up a role by exact file name."""
        for role in self.roles:
            if role.name == name:
                return role
        return None


SCHEMA_INSTRUCTION = """Here is the schema file. Answer the following questions if relevant:
* What are the most common anti-patterns in the schema?"""

STATEMENT_INSTRUCTION = """Here is the statement file. Answer the following questions if relevant:
* What are the most common anti-patterns in the query?"""

PLAN_INSTRUCTION = """Here is the plan.txt file. Answer the following questions if relevant:
* What are the slowest operations as shown in the plan?
* What missing indexes might speed up this query?"""

ENV_INSTRUCTION = """Here is the environment file. Answer the following questions if relevant:
* What version of CockroachDB is being used?
* What non-default settings are configured?"""


DEFAULT_ROLES = RoleTable(
    roles=(
        RoleSpec("schema.sql", SCHEMA_INSTRUCTION),
        RoleSpec("statement.sql", STATEMENT_INSTRUCTION),
        RoleSpec("plan.txt", PLAN_INSTRUCTION),
        RoleSpec("env.sql", ENV_INSTRUCTION),
    )
)


__all__ = ["DEFAULT_ROLES", "RoleSpec", "RoleTable"]

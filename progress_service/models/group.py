from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class Group:
    """Company/organization enrolling members into courses together.

    Groups are created lazily by the first group enrollment under a name
    and found by that exact name afterwards.
    """

    id: str
    name: str
    leaders: frozenset[str] = frozenset()
    students: frozenset[str] = frozenset()
    course_ids: frozenset[str] = frozenset()

    @staticmethod
    def new(
        *, name: str, member_id: str, as_leader: bool, course_id: str
    ) -> Group:
        return Group(
            id=str(uuid4()),
            name=name,
            leaders=frozenset({member_id}) if as_leader else frozenset(),
            students=frozenset() if as_leader else frozenset({member_id}),
            course_ids=frozenset({course_id}),
        )

    def is_leader(self, user_id: str) -> bool:
        return user_id in self.leaders

    def is_member(self, user_id: str) -> bool:
        return user_id in self.leaders or user_id in self.students

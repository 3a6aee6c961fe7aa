"""
Requester Context

Identity, role and enrollment of the caller, passed explicitly into every
service operation instead of being read from ambient request state.
"""

from dataclasses import dataclass, field
from typing import FrozenSet
from uuid import UUID

from app.models import User, UserRole


@dataclass(frozen=True)
class RequesterContext:
    user_id: UUID
    role: str
    class_ids: FrozenSet[UUID] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def is_enrolled_in(self, class_id: UUID) -> bool:
        return class_id in self.class_ids

    @classmethod
    def for_user(cls, user: User, class_ids=None) -> "RequesterContext":
        if class_ids is None:
            class_ids = user.class_ids
        return cls(user_id=user.id, role=user.role, class_ids=frozenset(class_ids))

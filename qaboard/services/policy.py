# services/policy.py
"""Visibility and ownership rules.

Every function here is pure: it looks only at the caller's ``Identity`` and the
ownership/visibility fields of the entity, never at the database. The
``ensure_*`` helpers raise the error the HTTP layer reports for that operation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from qaboard.errors import AdminRequired, Blocked, Unauthorized
from qaboard.models import Question, UserRole


@dataclass(frozen=True)
class Identity:
    id: int
    role: UserRole = UserRole.member
    blocked: bool = False

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(id=user.id, role=UserRole(user.role), blocked=bool(user.is_blocked))


def is_admin(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role == UserRole.admin


def is_owner(identity: Optional[Identity], question: Question) -> bool:
    return identity is not None and question.user_id == identity.id


def ensure_not_blocked(identity: Identity) -> Identity:
    if identity.blocked:
        raise Blocked()
    return identity


def require_role(identity: Identity, role: Union[UserRole, str]) -> Identity:
    if identity.role != UserRole(role):
        raise AdminRequired() if UserRole(role) == UserRole.admin else Unauthorized()
    return identity


# ---------------------------
# QUESTIONS
# ---------------------------
def can_view_question(identity: Optional[Identity], question: Question) -> bool:
    if question.is_public:
        return True
    return is_owner(identity, question) or is_admin(identity)


def can_edit_question(identity: Identity, question: Question) -> bool:
    # admins moderate by deleting, not by rewriting someone else's question
    return is_owner(identity, question)


def can_delete_question(identity: Identity, question: Question) -> bool:
    return is_owner(identity, question) or is_admin(identity)


def ensure_can_view_question(identity: Optional[Identity], question: Question) -> None:
    if not can_view_question(identity, question):
        raise Unauthorized("Not authorized to access this question")


def ensure_can_edit_question(identity: Identity, question: Question) -> None:
    if not can_edit_question(identity, question):
        raise Unauthorized("Not authorized to update this question")


def ensure_can_delete_question(identity: Identity, question: Question) -> None:
    if not can_delete_question(identity, question):
        raise Unauthorized("Not authorized to delete this question")


# ---------------------------
# ANSWERS
# ---------------------------
def can_answer_question(identity: Identity, question: Question) -> bool:
    # Any signed-in, non-blocked user may answer, private questions included.
    return not identity.blocked


def can_accept_answer(identity: Identity, question: Question) -> bool:
    return is_owner(identity, question)


def ensure_can_accept_answer(identity: Identity, question: Question) -> None:
    if not can_accept_answer(identity, question):
        raise Unauthorized("Not authorized to accept this answer")

from sqlalchemy.orm import Session

from app.core.errors import AccessDeniedError, NotFoundError, ValidationError
from app.modules.auth.deps import UserContext
from app.modules.auth.models import ROLE_CHILD, User
from app.modules.auth.users_service import GetUser, ListChildren


def RequireVisibleUser(db: Session, user: UserContext, target_id: int) -> User:
    """Self, or a parent looking at someone in the same family."""
    target = GetUser(db, target_id)
    if not target:
        raise NotFoundError("User not found")
    if target.Id == user.Id:
        return target
    if not user.IsParent or target.FamilyId != user.FamilyId:
        raise AccessDeniedError("Access denied")
    return target


def RequireFamilyChild(db: Session, user: UserContext, child_id: int, field: str = "UserId") -> User:
    child = GetUser(db, child_id)
    if not child or child.Role != ROLE_CHILD or child.FamilyId != user.FamilyId:
        raise ValidationError("UserId must be a child in your family", [field])
    return child


def ResolveScopeUserIds(db: Session, user: UserContext, user_id: int | None = None) -> list[int]:
    if not user.IsParent:
        if user_id is not None and user_id != user.Id:
            raise AccessDeniedError("Access denied")
        return [user.Id]
    if user_id is not None:
        return [RequireVisibleUser(db, user, user_id).Id]
    return [child.Id for child in ListChildren(db, user.FamilyId)]


def RequireOwnedByFamily(db: Session, user: UserContext, owner_id: int, label: str) -> None:
    owner = GetUser(db, owner_id)
    if not owner or owner.FamilyId != user.FamilyId:
        raise NotFoundError(f"{label} not found")

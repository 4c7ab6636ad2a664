# src/services/rbac_service.py
import logging
import uuid

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.models import Permission, Role, RolePermission, User, UserRole
from src.rbac.catalog import ViewCatalog, get_catalog, split_permission_code
from src.rbac.grants import (
    PermissionGrant,
    grants_to_permission_codes,
    permission_codes_to_grants,
)
from src.rbac.roles import ADMINISTRATOR_ROLE

logger = logging.getLogger(__name__)


def user_has_permission(db: Session, user: User, permission_code: str) -> bool:
    """Check if a user has a specific ``<view>.<action>`` permission."""
    if not user.is_active:
        return False

    # Administrators hold every permission
    if is_admin(db, user):
        return True

    return permission_code in get_user_permissions(db, user)


def is_admin(db: Session, user: User) -> bool:
    """Check for the Administrator role."""
    admin_role = get_role_by_name(db, ADMINISTRATOR_ROLE)
    if not admin_role:
        return False
    return any(ur.role_id == admin_role.id for ur in user.user_roles)


def get_user_permissions(db: Session, user: User) -> set[str]:
    """Get all permission codes granted to a user through active roles."""
    rows = (
        db.query(RolePermission.permission_code)
        .join(Role, Role.id == RolePermission.role_id)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id, Role.is_active.is_(True))
        .all()
    )
    return {code for (code,) in rows}


def get_user_roles(db: Session, user: User) -> list[Role]:
    """Get the roles (profiles) assigned to a user, ordered by name."""
    return (
        db.query(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id)
        .order_by(Role.name)
        .all()
    )


def set_user_roles(db: Session, user: User, role_ids: list[uuid.UUID]) -> None:
    """Replace a user's role assignments. Does not commit."""
    wanted = set(role_ids)
    for user_role in list(user.user_roles):
        if user_role.role_id not in wanted:
            user.user_roles.remove(user_role)
    current = {ur.role_id for ur in user.user_roles}
    for role_id in role_ids:
        if role_id not in current:
            user.user_roles.append(UserRole(role_id=role_id))
            current.add(role_id)


def get_role(db: Session, role_id: uuid.UUID) -> Role | None:
    return db.query(Role).filter(Role.id == role_id).first()


def get_role_by_name(db: Session, name: str) -> Role | None:
    """Get a role by its name."""
    return db.query(Role).filter(Role.name == name).first()


def list_roles(db: Session, active_only: bool = False) -> list[Role]:
    query = db.query(Role)
    if active_only:
        query = query.filter(Role.is_active.is_(True))
    return query.order_by(Role.name).all()


def find_missing_roles(db: Session, role_ids: list[uuid.UUID]) -> list[uuid.UUID]:
    """Return the ids from ``role_ids`` that do not exist."""
    if not role_ids:
        return []
    found = {r for (r,) in db.query(Role.id).filter(Role.id.in_(role_ids)).all()}
    return [r for r in role_ids if r not in found]


def register_permission(
    db: Session, code: str, description: str | None = None
) -> Permission:
    """Register a permission if it does not already exist."""
    permission = db.query(Permission).filter(Permission.code == code).first()
    if not permission:
        view_code, action_code = split_permission_code(code)
        permission = Permission(
            code=code,
            view_code=view_code,
            action_code=action_code,
            description=description,
        )
        db.add(permission)
        db.flush()
    return permission


def get_role_permission_codes(db: Session, role: Role) -> set[str]:
    rows = (
        db.query(RolePermission.permission_code)
        .filter(RolePermission.role_id == role.id)
        .all()
    )
    return {code for (code,) in rows}


def get_role_grants(
    db: Session, role: Role, catalog: ViewCatalog | None = None
) -> list[PermissionGrant]:
    """The role's permissions as per-view grants, in catalog order."""
    catalog = catalog or get_catalog()
    return permission_codes_to_grants(get_role_permission_codes(db, role), catalog)


def set_role_grants(
    db: Session,
    role: Role,
    grants: list[PermissionGrant],
    catalog: ViewCatalog | None = None,
) -> tuple[set[str], set[str]]:
    """Reconcile a role's stored permissions with an edited grant list.

    Actions the catalog does not know are dropped. Does not commit.

    Returns:
        The permission codes that were added and removed.
    """
    catalog = catalog or get_catalog()
    wanted = grants_to_permission_codes(grants, catalog)
    current = get_role_permission_codes(db, role)

    added = wanted - current
    removed = current - wanted

    if removed:
        (
            db.query(RolePermission)
            .filter(
                RolePermission.role_id == role.id,
                RolePermission.permission_code.in_(removed),
            )
            .delete(synchronize_session=False)
        )
    for code in sorted(added):
        register_permission(db, code)
        db.add(RolePermission(role_id=role.id, permission_code=code))

    if added or removed:
        logger.info(
            f"Role {role.name}: granted {len(added)} and revoked "
            f"{len(removed)} permissions"
        )
    return added, removed


def create_role(
    db: Session,
    name: str,
    description: str | None = None,
    is_active: bool = True,
    grants: list[PermissionGrant] | None = None,
    catalog: ViewCatalog | None = None,
) -> Role:
    role = Role(name=name, description=description, is_active=is_active, is_system=False)
    db.add(role)
    db.flush()
    if grants:
        set_role_grants(db, role, grants, catalog)
    db.commit()
    db.refresh(role)
    event_bus.publish(AppEvent.ROLE_CREATED, {"role_id": str(role.id)})
    return role


def update_role(
    db: Session,
    role: Role,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
    grants: list[PermissionGrant] | None = None,
    catalog: ViewCatalog | None = None,
) -> Role:
    if name is not None:
        role.name = name
    if description is not None:
        role.description = description
    if is_active is not None:
        role.is_active = is_active
    if grants is not None:
        set_role_grants(db, role, grants, catalog)
    db.commit()
    db.refresh(role)
    event_bus.publish(AppEvent.ROLE_UPDATED, {"role_id": str(role.id)})
    return role


def delete_role(db: Session, role: Role) -> None:
    role_id = str(role.id)
    db.delete(role)
    db.commit()
    event_bus.publish(AppEvent.ROLE_DELETED, {"role_id": role_id})

# src/services/rbac_seed_service.py
from sqlalchemy.orm import Session

from src.models import Role, RolePermission
from src.rbac.catalog import ViewCatalog, get_catalog, make_permission_code
from src.rbac.roles import default_roles

from . import rbac_service


def seed_rbac_data(db: Session, catalog: ViewCatalog | None = None) -> None:
    """Seeds the database with catalog permissions and default roles.

    This function is idempotent. The Administrator role is topped up with
    permissions for views added to the catalog since it was created.
    @param db: SQLAlchemy Session object
    """
    catalog = catalog or get_catalog()

    for view in catalog:
        for action in view.actions:
            rbac_service.register_permission(
                db,
                make_permission_code(view.code, action.code),
                description=f"{action.name} on {view.name}",
            )

    for role_data in default_roles(catalog):
        role = rbac_service.get_role_by_name(db, role_data["name"])
        if not role:
            role = Role(
                name=role_data["name"],
                is_system=role_data["is_system"],
                description=role_data["description"],
            )
            db.add(role)
            db.flush()  # Flush to get the role ID
            existing: set[str] = set()
        elif role.is_system:
            existing = rbac_service.get_role_permission_codes(db, role)
        else:
            continue

        for perm_code in role_data["permissions"]:
            if perm_code not in existing:
                db.add(RolePermission(role_id=role.id, permission_code=perm_code))
    db.commit()

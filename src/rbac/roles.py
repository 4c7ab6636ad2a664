# src/rbac/roles.py
from src.rbac.catalog import ViewCatalog

ADMINISTRATOR_ROLE = "Administrator"


def default_roles(catalog: ViewCatalog) -> list[dict]:
    """Roles to seed on first run.

    Only the Administrator role is a system role (is_system=True); it always
    holds every catalog permission and cannot be modified. The other roles
    are regular roles and can be fully managed from the role editor.
    """
    all_codes = catalog.permission_codes()
    return [
        {
            "name": ADMINISTRATOR_ROLE,
            "is_system": True,
            "description": "Grants every action on every view.",
            "permissions": all_codes,
        },
        {
            "name": "Operator",
            "is_system": False,
            "description": "Day-to-day work on requests and inventory.",
            "permissions": [
                c
                for c in all_codes
                if c.startswith(("requests.", "inventory."))
                and not c.endswith(".delete")
            ],
        },
        {
            "name": "Viewer",
            "is_system": False,
            "description": "Read-only access to every view.",
            "permissions": [c for c in all_codes if c.endswith(".view")],
        },
    ]

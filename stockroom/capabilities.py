"""Role to capability mapping shared by the API and the client view model."""

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

VIEW_INVENTORY = "view_inventory"
MANAGE_INVENTORY = "manage_inventory"
CREATE_SUPPLIERS = "create_suppliers"
PLACE_ORDERS = "place_orders"
RECEIVE_ORDERS = "receive_orders"
VIEW_REPORTS = "view_reports"
MANAGE_CATEGORIES = "manage_categories"
MANAGE_USERS = "manage_users"

_USER_CAPABILITIES = frozenset([
    VIEW_INVENTORY,
    CREATE_SUPPLIERS,
    PLACE_ORDERS,
    RECEIVE_ORDERS,
    VIEW_REPORTS,
])

ROLE_CAPABILITIES = {
    ROLE_USER: _USER_CAPABILITIES,
    ROLE_ADMIN: _USER_CAPABILITIES | {MANAGE_INVENTORY, MANAGE_CATEGORIES, MANAGE_USERS},
}


def capabilities_for(role):
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(role, capability):
    return capability in capabilities_for(role)

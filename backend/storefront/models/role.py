"""Role & Permission enumerations - closed sets for the RBAC core."""

import enum


class Permission(str, enum.Enum):
    """All capability tokens in the storefront."""
    # Products
    VIEW_PRODUCTS = "view_products"
    CREATE_PRODUCT = "create_product"
    EDIT_PRODUCT = "edit_product"
    DELETE_PRODUCT = "delete_product"
    MANAGE_CATEGORIES = "manage_categories"
    # Cart
    VIEW_CART = "view_cart"
    ADD_TO_CART = "add_to_cart"
    CHECKOUT = "checkout"
    # Orders
    VIEW_OWN_ORDERS = "view_own_orders"
    VIEW_ALL_ORDERS = "view_all_orders"
    CREATE_ORDER = "create_order"
    UPDATE_ORDER_STATUS = "update_order_status"
    # Back office
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_USERS = "manage_users"
    ACCESS_ADMIN_PANEL = "access_admin_panel"
    VIEW_AUDIT_LOGS = "view_audit_logs"


class RoleType(str, enum.Enum):
    SUPERADMIN = "superadmin"
    OWNER = "owner"
    CASHIER = "cashier"
    USER = "user"

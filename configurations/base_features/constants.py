SERVER_VERSION = "0.1.0"

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_OPERATOR = "operator"
STANDARD_ROLES = [ROLE_ADMIN, ROLE_MANAGER, ROLE_OPERATOR]

# performer recorded when an operation runs without a signed-in user
SYSTEM_PERFORMER = "system"

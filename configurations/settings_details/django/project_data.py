from configurations.settings_details.env import env

# Cap on rows returned by the stock movement history
STOCK_MOVEMENT_LIST_LIMIT = env.int("STOCK_MOVEMENT_LIST_LIMIT", default=200)
STOCK_MOVEMENT_LIST_MAX = 500

# Listing caps for the stock and open work-order pickers
STOCK_LIST_LIMIT = env.int("STOCK_LIST_LIMIT", default=100)
OPEN_WORK_ORDER_LIST_LIMIT = env.int("OPEN_WORK_ORDER_LIST_LIMIT", default=50)

# Bootstrap admin created on first start when both are set
FACTORY_ADMIN_USERNAME = env("FACTORY_ADMIN_USERNAME", default=None)
FACTORY_ADMIN_PASSWORD = env("FACTORY_ADMIN_PASSWORD", default=None)

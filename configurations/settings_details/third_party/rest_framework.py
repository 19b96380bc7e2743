from datetime import timedelta



REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "factory_users.auth_jwt.FactoryJWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "factory_users.permissions.IsFactoryAuthenticated",
    ),
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer"
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser"
    ],
    "EXCEPTION_HANDLER": "rest_framework.views.exception_handler",
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}


SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=12),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "UPDATE_LAST_LOGIN": True,
    "USER_ID_FIELD": "id",
}

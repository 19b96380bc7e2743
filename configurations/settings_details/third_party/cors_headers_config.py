from configurations.settings_details.env import env

CORS_ALLOW_ALL_ORIGINS = env.bool("DEBUG", True)  # True for dev, False for prod
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[
    "http://localhost:3000",
    "http://127.0.0.1:3000",
])
CORS_ALLOW_CREDENTIALS = True

CSRF_TRUSTED_ORIGINS = [origin.replace("http", "https") for origin in CORS_ALLOWED_ORIGINS if "localhost" not in origin]

# Keep in sync with pyproject.toml
SERVICE_NAME = "simple-api-demo"
SERVICE_VERSION = "0.1.0"

import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./printshop.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    API_RELOAD = bool(data.get("API_RELOAD", False))
    # Development convenience; deployments manage the schema with migrations
    CREATE_SCHEMA_ON_STARTUP = bool(data.get("CREATE_SCHEMA_ON_STARTUP", True))

    # Storage-bound operations: deadline and bounded conflict retries
    OPERATION_TIMEOUT_SECONDS = data.get("OPERATION_TIMEOUT_SECONDS", 10.0)
    CONFLICT_RETRY_ATTEMPTS = data.get("CONFLICT_RETRY_ATTEMPTS", 3)
    CONFLICT_RETRY_BACKOFF_SECONDS = data.get("CONFLICT_RETRY_BACKOFF_SECONDS", 0.05)
    SQLITE_BUSY_TIMEOUT_SECONDS = data.get("SQLITE_BUSY_TIMEOUT_SECONDS", 30)

    # Roll installed without an explicit length (metres)
    DEFAULT_ROLL_LENGTH = data.get("DEFAULT_ROLL_LENGTH", 105)

    # Work type -> material consumption policy. Work types not listed here
    # consume no material. roll_selection is "fifo" or "manual".
    WORK_TYPES = data.get(
        "WORK_TYPES",
        {
            "DTF": {"material_type": "DTF", "roll_selection": "fifo"},
            "SUBLIMATION": {"material_type": "SUBLIM", "roll_selection": "manual"},
        },
    )

    # Ledger audit worker
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)
    RECONCILIATION_REPAIR = bool(data.get("RECONCILIATION_REPAIR", False))

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    def __init__(self, **overrides):
        # Storage backend: "memory" or "dynamodb"
        self.store_backend = os.getenv("SEATADMIN_STORE", "memory").lower()

        # DynamoDB
        self.aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        self.aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        self.aws_region = os.getenv("AWS_REGION", "us-east-1")
        self.table_name = os.getenv("EVENTS_TABLE_NAME")

        # Seat engine
        self.lock_timeout = float(os.getenv("SEATADMIN_LOCK_TIMEOUT", "5"))
        self.strict_transitions = _env_flag("SEATADMIN_STRICT_TRANSITIONS")
        self.seed_demo = _env_flag("SEATADMIN_SEED_DEMO", "True")

        # Server
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 8000))
        self.debug = _env_flag("DEBUG")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting '{key}'")
            setattr(self, key, value)


settings = Settings()

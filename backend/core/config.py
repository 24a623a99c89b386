import os
from typing import List, Literal, Optional
from dotenv import load_dotenv
import logging


logger = logging.getLogger(__name__)

# Load environment variables from .env file located in the backend directory.
# Environment variables explicitly set (e.g., by Docker Compose) take precedence.
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, '.env')
load_dotenv(ENV_PATH)


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    """
    Parses boolean flags from the environment.
    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    if value is None or value.strip() == "":
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_brokers(value: str) -> List[str]:
    """
    Parses Kafka bootstrap servers. Accepts a comma-separated string.
    Example: "kafka-1:9092,kafka-2:9092" → ["kafka-1:9092", "kafka-2:9092"]
    """
    brokers = [item.strip() for item in (value or "").split(",") if item.strip()]
    if not brokers:
        raise ValueError("KAFKA_BOOTSTRAP_SERVERS must name at least one broker")
    return brokers


class Settings:
    # --- General Environment Settings ---
    # ENVIRONMENT determines application behavior (e.g., logging level, debug modes).
    ENVIRONMENT: Literal["local", "staging",
                         "production"] = os.getenv('ENVIRONMENT', 'local')
    # SERVICE_NAME is the producer identity stamped on every published message
    # and selects which routers the app factory mounts.
    SERVICE_NAME: str = os.getenv('SERVICE_NAME', 'auth-service')

    # --- Logging ---
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    # One of: json, simple, detailed
    LOG_FORMAT: str = os.getenv('LOG_FORMAT', 'json')

    # --- Kafka Configuration ---
    RAW_KAFKA_BOOTSTRAP_SERVERS: str = os.getenv('KAFKA_BOOTSTRAP_SERVERS', 'localhost:9092')
    KAFKA_BOOTSTRAP_SERVERS: List[str] = parse_brokers(RAW_KAFKA_BOOTSTRAP_SERVERS)
    # Upper bounds applied around producer start and each publish call.
    KAFKA_CONNECT_TIMEOUT_SECONDS: float = float(os.getenv('KAFKA_CONNECT_TIMEOUT_SECONDS', 10))
    KAFKA_PUBLISH_TIMEOUT_SECONDS: float = float(os.getenv('KAFKA_PUBLISH_TIMEOUT_SECONDS', 10))
    KAFKA_REQUEST_TIMEOUT_MS: int = int(os.getenv('KAFKA_REQUEST_TIMEOUT_MS', 30000))
    KAFKA_RETRY_BACKOFF_MS: int = int(os.getenv('KAFKA_RETRY_BACKOFF_MS', 100))
    KAFKA_COMPRESSION_TYPE: Optional[str] = os.getenv('KAFKA_COMPRESSION_TYPE', 'gzip') or None
    KAFKA_LINGER_MS: int = int(os.getenv('KAFKA_LINGER_MS', 0))
    KAFKA_MAX_BATCH_SIZE: int = int(os.getenv('KAFKA_MAX_BATCH_SIZE', 16384))
    KAFKA_ENABLE_IDEMPOTENCE: bool = parse_bool(os.getenv('KAFKA_ENABLE_IDEMPOTENCE'), True)
    # When true the service refuses to start without a broker connection;
    # otherwise it starts degraded and critical events fail fast.
    KAFKA_REQUIRED_ON_STARTUP: bool = parse_bool(os.getenv('KAFKA_REQUIRED_ON_STARTUP'), False)

    # --- Circuit Breaker ---
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = int(os.getenv('CIRCUIT_BREAKER_FAILURE_THRESHOLD', 5))
    CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS: float = float(
        os.getenv('CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS', 60))

    # --- Request context ---
    CORRELATION_ID_HEADER: str = os.getenv('CORRELATION_ID_HEADER', 'X-Correlation-ID')

    # --- Security Settings ---
    PASSWORD_HASH_SCHEME: str = os.getenv('PASSWORD_HASH_SCHEME', 'argon2')

    @property
    def kafka_bootstrap_servers(self) -> str:
        """Comma-separated form expected by the Kafka client."""
        return ",".join(self.KAFKA_BOOTSTRAP_SERVERS)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Instantiate the settings object to be used throughout the application
settings = Settings()

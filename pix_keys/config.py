"""Configuration management for pix-keys."""

from dataclasses import dataclass, field

from pix_keys.exceptions import ConfigurationError
from pix_keys.models.enums import PersonType


@dataclass
class KafkaConfig:
    """Kafka producer configuration for lifecycle events."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic: str = "dev.pix.keys"


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "pixkeys"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class RulesConfig:
    """Account-level limits enforced by the rule engine."""

    individual_key_limit: int = 5
    entity_key_limit: int = 20

    def __post_init__(self) -> None:
        for name in ("individual_key_limit", "entity_key_limit"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be positive")

    def key_limit(self, person_type: PersonType) -> int:
        """Maximum active keys per account for ``person_type``."""
        if person_type == PersonType.ENTITY:
            return self.entity_key_limit
        return self.individual_key_limit


@dataclass
class PixKeysConfig:
    """Main configuration for pix-keys."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "PixKeysConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic=os.getenv("PIX_TOPIC", "dev.pix.keys"),
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "pixkeys"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        try:
            rules = RulesConfig(
                individual_key_limit=int(os.getenv("PIX_INDIVIDUAL_KEY_LIMIT", "5")),
                entity_key_limit=int(os.getenv("PIX_ENTITY_KEY_LIMIT", "20")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid key limit: {e}") from e

        return cls(
            kafka=kafka,
            postgres=postgres,
            rules=rules,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )

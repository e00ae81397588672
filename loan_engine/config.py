"""Configuration management for loan-engine."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loan_engine.exceptions import ConfigurationError

REGISTRY_BACKENDS = ("memory", "postgres")
SINK_TYPES = ("none", "console", "json", "kafka")
LOG_FORMATS = ("standard", "json")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "loans"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class OutputConfig:
    """Output configuration for file sinks."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for loan-engine."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    registry: str = "memory"
    sink: str = "none"
    events_topic: str = "lending.loan-events"
    log_level: str = "INFO"
    log_format: str = "standard"

    def __post_init__(self) -> None:
        if self.registry not in REGISTRY_BACKENDS:
            raise ConfigurationError(
                f"Unknown registry backend {self.registry!r}; expected one of {REGISTRY_BACKENDS}"
            )
        if self.sink not in SINK_TYPES:
            raise ConfigurationError(f"Unknown sink {self.sink!r}; expected one of {SINK_TYPES}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Unknown log format {self.log_format!r}; expected one of {LOG_FORMATS}"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        try:
            port = int(os.getenv("POSTGRES_PORT", "5432"))
        except ValueError as e:
            raise ConfigurationError(f"POSTGRES_PORT must be an integer: {e}") from e

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=os.getenv("POSTGRES_DB", "loans"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            kafka=kafka,
            postgres=postgres,
            output=output,
            registry=os.getenv("LOAN_ENGINE_REGISTRY", "memory").lower(),
            sink=os.getenv("LOAN_ENGINE_SINK", "none").lower(),
            events_topic=os.getenv("LOAN_EVENTS_TOPIC", "lending.loan-events"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard").lower(),
        )


def build_registry(config: EngineConfig) -> Any:
    """Create the registry selected by ``config.registry``."""
    if config.registry == "postgres":
        from loan_engine.store.postgres import PostgresLoanRegistry

        registry = PostgresLoanRegistry(config.postgres.connection_string)
        registry.create_tables()
        return registry

    from loan_engine.store.memory import InMemoryLoanRegistry

    return InMemoryLoanRegistry()


def build_sink(config: EngineConfig) -> Any:
    """Create the event sink selected by ``config.sink`` (None for "none")."""
    if config.sink == "console":
        from loan_engine.sinks.console import ConsoleSink

        return ConsoleSink(pretty=config.output.pretty_json)
    if config.sink == "json":
        from loan_engine.sinks.json_file import JsonFileSink

        return JsonFileSink(config.output.json_output_dir, pretty=config.output.pretty_json)
    if config.sink == "kafka":
        from loan_engine.sinks.kafka import KafkaSink, ProducerConfig

        return KafkaSink(
            ProducerConfig(
                bootstrap_servers=config.kafka.bootstrap_servers,
                acks=config.kafka.acks,
                batch_size=config.kafka.batch_size,
                linger_ms=config.kafka.linger_ms,
                compression=config.kafka.compression,
                retries=config.kafka.retries,
            )
        )
    return None

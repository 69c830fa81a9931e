"""Configuration management for kg-accessor."""

import os
from pathlib import Path
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
import yaml


class Neo4jConfig(BaseModel):
    """Neo4j connection configuration."""
    uri: str = Field(default="bolt://localhost:7687")
    username: str = Field(default="neo4j")
    password: str = Field(default="password")
    database: str = Field(default="neo4j")


class GraphConfig(BaseModel):
    """Graph database configuration."""
    backend: str = Field(default="neo4j")


class RegistryConfig(BaseModel):
    """Schema registry and traversal configuration."""
    schema_path: Optional[str] = Field(default=None)
    kind_key: str = Field(default="kind")
    ambiguity_policy: str = Field(default="first_declared")
    cache_relations: bool = Field(default=False)

    @field_validator('ambiguity_policy')
    @classmethod
    def validate_ambiguity_policy(cls, v):
        """Validate ambiguity policy."""
        valid_policies = ["first_declared", "error"]
        if v.lower() not in valid_policies:
            raise ValueError(f"Ambiguity policy must be one of {valid_policies}")
        return v.lower()

    @field_validator('kind_key')
    @classmethod
    def validate_kind_key(cls, v):
        """Kind key must be a non-empty property name."""
        if not v or not v.strip():
            raise ValueError("Kind key must not be empty")
        return v.strip()


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppConfig(BaseModel):
    """Application and logging configuration."""
    log_level: str = Field(default="INFO")
    log_show_time: bool = Field(default=True)
    log_show_path: bool = Field(default=False)
    driver_log_level: str = Field(default="WARNING")

    @field_validator('log_level', 'driver_log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {LOG_LEVELS}")
        return v.upper()


class Settings(BaseModel):
    """Main configuration class."""
    neo4j: Neo4jConfig = Field(default_factory=Neo4jConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    app: AppConfig = Field(default_factory=AppConfig)

    @classmethod
    def load_config(cls, config_overrides: Optional[Dict[str, Any]] = None) -> "Settings":
        """
        Load configuration from multiple sources with proper precedence:
        1. Explicit overrides (highest priority)
        2. YAML configuration file
        3. Environment variables
        4. .env file values
        5. Default values (lowest priority)
        """
        # Load .env file first (lowest priority)
        load_dotenv()

        yaml_config = cls._load_yaml_config()

        config_data = {}

        env_config = cls._load_env_config()
        config_data = cls._merge_config(config_data, env_config)

        if yaml_config:
            config_data = cls._merge_config(config_data, yaml_config)

        if config_overrides:
            config_data = cls._merge_config(config_data, config_overrides)

        return cls(**config_data)

    @classmethod
    def _load_yaml_config(cls) -> Optional[Dict[str, Any]]:
        """Load configuration from YAML file."""
        config_paths = [
            Path("./kg_accessor.yaml"),
            Path("./config.yaml"),
            Path.home() / ".kg_accessor.yaml"
        ]

        for config_path in config_paths:
            if config_path.exists():
                try:
                    with open(config_path, 'r') as f:
                        return yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Error parsing YAML config file {config_path}: {e}")
                except OSError as e:
                    raise ValueError(f"Error reading config file {config_path}: {e}")

        return None

    @classmethod
    def _load_env_config(cls) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config = {}

        neo4j_config = {}
        if os.getenv("NEO4J_URI"):
            neo4j_config["uri"] = os.getenv("NEO4J_URI")
        if os.getenv("NEO4J_USERNAME"):
            neo4j_config["username"] = os.getenv("NEO4J_USERNAME")
        if os.getenv("NEO4J_PASSWORD"):
            neo4j_config["password"] = os.getenv("NEO4J_PASSWORD")
        if os.getenv("NEO4J_DATABASE"):
            neo4j_config["database"] = os.getenv("NEO4J_DATABASE")
        if neo4j_config:
            config["neo4j"] = neo4j_config

        registry_config = {}
        if os.getenv("KG_SCHEMA_PATH"):
            registry_config["schema_path"] = os.getenv("KG_SCHEMA_PATH")
        if os.getenv("KG_KIND_KEY"):
            registry_config["kind_key"] = os.getenv("KG_KIND_KEY")
        if os.getenv("KG_AMBIGUITY_POLICY"):
            registry_config["ambiguity_policy"] = os.getenv("KG_AMBIGUITY_POLICY")
        if os.getenv("KG_CACHE_RELATIONS"):
            registry_config["cache_relations"] = os.getenv("KG_CACHE_RELATIONS")
        if registry_config:
            config["registry"] = registry_config

        app_config = {}
        if os.getenv("LOG_LEVEL"):
            app_config["log_level"] = os.getenv("LOG_LEVEL")
        if os.getenv("NEO4J_LOG_LEVEL"):
            app_config["driver_log_level"] = os.getenv("NEO4J_LOG_LEVEL")
        if app_config:
            config["app"] = app_config

        return config

    @classmethod
    def _merge_config(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._merge_config(result[key], value)
            else:
                result[key] = value

        return result


def get_settings(config_overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Get application settings with optional overrides."""
    return Settings.load_config(config_overrides)

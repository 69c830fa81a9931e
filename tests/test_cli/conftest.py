"""Fixtures for CLI tests."""

import pytest
from unittest.mock import patch


SCHEMA_YAML = """
kinds:
  - name: Topic
    fields:
      name: string
    relations:
      subtopics: {targets: [Topic]}
      cover: {target: Image, cardinality: one}
  - name: Image
    fields:
      image_url: url
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML)
    return path


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep local config files and environment out of CLI runs."""
    for name in ("KG_SCHEMA_PATH", "KG_KIND_KEY", "KG_AMBIGUITY_POLICY",
                 "LOG_LEVEL", "NEO4J_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    with patch("kg_accessor.config.settings.load_dotenv"), \
            patch("kg_accessor.config.settings.Settings._load_yaml_config", return_value=None):
        yield

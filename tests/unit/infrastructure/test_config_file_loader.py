"""Unit tests for ConfigFileLoader."""

from pathlib import Path

import pytest

from coupling_detector.domain.errors import ConfigurationError
from coupling_detector.infrastructure.config_file_loader import ConfigFileLoader

PYPROJECT = """\
[project]
name = "acme"

[tool.coupling-detector]
extension = ".php"

[tool.coupling-detector.forbidden]
"Acme/Component" = ["Pim", "Bundle"]

[tool.coupling-detector.legacy-exclusions]
"Acme/Component" = ['Pim\\Bundle\\X']
"""


class TestConfigFileLoader:
    """Test discovery and section selection."""

    def test_load_config_from_fs_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        nested = tmp_path / "src" / "Acme"
        nested.mkdir(parents=True)

        config = ConfigFileLoader.load_config_from_fs(str(nested))

        assert config["forbidden"] == {"Acme/Component": ["Pim", "Bundle"]}
        assert config["legacy-exclusions"] == {"Acme/Component": ["Pim\\Bundle\\X"]}

    def test_pyproject_without_section_is_passed_over(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT)
        child = tmp_path / "child"
        child.mkdir()
        (child / "pyproject.toml").write_text('[project]\nname = "child"\n')

        config = ConfigFileLoader.load_config_from_fs(str(child))

        assert config["extension"] == ".php"

    def test_load_config_file_reads_tool_section(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(PYPROJECT)

        config = ConfigFileLoader.load_config_file(str(path))

        assert set(config) == {"extension", "forbidden", "legacy-exclusions"}

    def test_load_config_file_accepts_top_level_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "coupling.toml"
        path.write_text('[forbidden]\n"Acme/Component" = ["Pim"]\n')

        assert ConfigFileLoader.load_config_file(str(path)) == {"forbidden": {"Acme/Component": ["Pim"]}}

    def test_load_config_file_accepts_bare_section(self, tmp_path: Path) -> None:
        path = tmp_path / "coupling.toml"
        path.write_text('[coupling-detector.only]\n"Acme/Domain" = ["Acme/Domain"]\n')

        assert ConfigFileLoader.load_config_file(str(path)) == {"only": {"Acme/Domain": ["Acme/Domain"]}}

    def test_missing_file_is_a_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigFileLoader.load_config_file(str(tmp_path / "missing.toml"))

    def test_invalid_toml_is_a_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.toml"
        path.write_text("[forbidden\n")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            ConfigFileLoader.load_config_file(str(path))

    def test_section_must_be_a_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool]\ncoupling-detector = "nope"\n')

        with pytest.raises(ConfigurationError, match="must be a table"):
            ConfigFileLoader.load_config_file(str(path))

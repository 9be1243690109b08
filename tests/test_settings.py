"""Project config loading, network registry and credential providers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from perkdeploy.errors import ConfigError, UnsupportedNetworkError
from perkdeploy.explorer.chains import ETHERSCAN_V2_API_URL, FAMILY_ETHERSCAN, FAMILY_OKLINK
from perkdeploy.settings import (
    CompilerSettings,
    EnvCredentialProvider,
    NetworkProfile,
    ProjectConfig,
    SchemaValidationError,
    StaticCredentialProvider,
    load_constructor_args,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


class TestProjectConfig:
    def test_shipped_config_loads(self) -> None:
        config = ProjectConfig.from_path(REPO_ROOT / "deploy.config.json")
        assert set(config.networks) == {"localhost", "polygonMumbai", "sepolia", "polygonAmoy"}
        assert config.compiler == CompilerSettings("0.8.21", True, 15000, "paris")
        assert config.sourcify_enabled is True
        assert config.deployment is not None
        assert config.deployment.contract == "AkemonaERC20Perk"
        assert config.deployment.constructor_args_path == REPO_ROOT / "constructor-args" / "perk-deploy-args.py"
        assert config.artifacts_dir == REPO_ROOT / "artifacts"
        assert config.compile_command == ("npx", "hardhat", "compile")

    def test_custom_chain_overrides_builtin(self, project_config: ProjectConfig) -> None:
        explorer = project_config.networks["polygonAmoy"].explorer
        assert explorer is not None
        assert explorer.family == FAMILY_OKLINK
        assert explorer.api_url.startswith("https://www.oklink.com/")
        assert explorer.api_key_env == "OKLINK_API_KEY"
        assert explorer.sends_chain_id is False

    def test_builtin_explorer(self, project_config: ProjectConfig) -> None:
        explorer = project_config.networks["sepolia"].explorer
        assert explorer is not None
        assert explorer.family == FAMILY_ETHERSCAN
        assert explorer.api_url == ETHERSCAN_V2_API_URL
        assert explorer.chain_id == 11155111
        assert explorer.address_url("0xabc") == "https://sepolia.etherscan.io/address/0xabc#code"

    def test_local_network_has_no_explorer(self, project_config: ProjectConfig) -> None:
        assert project_config.networks["localhost"].explorer is None

    def test_schema_rejects_network_without_url(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaValidationError) as excinfo:
            ProjectConfig.from_dict({"networks": {"sepolia": {}}}, base_dir=tmp_path)
        assert any("url" in err for err in excinfo.value.errors)

    def test_schema_rejects_unknown_keys(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaValidationError):
            ProjectConfig.from_dict({"networks": {"a": {"url": "http://x"}}, "gasReporter": {}}, base_dir=tmp_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            ProjectConfig.from_path(tmp_path / "deploy.config.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "deploy.config.json"
        path.write_text("{networks:", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            ProjectConfig.from_path(path)

    def test_empty_url_rejected(self) -> None:
        with pytest.raises(ConfigError):
            NetworkProfile(name="broken", url="")


class TestNetworkRegistry:
    def test_exact_lookup(self, project_config: ProjectConfig) -> None:
        profile = project_config.networks.resolve("sepolia")
        assert profile.url == "https://rpc.sepolia.org"

    def test_no_case_folding(self, project_config: ProjectConfig) -> None:
        with pytest.raises(UnsupportedNetworkError):
            project_config.networks.resolve("Sepolia")

    def test_unknown_network(self, project_config: ProjectConfig) -> None:
        with pytest.raises(UnsupportedNetworkError, match="known networks"):
            project_config.networks.resolve("mainnet")

    def test_registry_is_read_only(self, project_config: ProjectConfig) -> None:
        with pytest.raises(TypeError):
            project_config.networks["evil"] = NetworkProfile("evil", "http://evil")  # type: ignore[index]

    def test_api_key_envs(self, project_config: ProjectConfig) -> None:
        assert project_config.networks.api_key_envs() == {
            "sepolia": "ETHERSCAN_API_KEY",
            "polygonAmoy": "OKLINK_API_KEY",
        }


class TestCredentials:
    def test_env_provider(self) -> None:
        provider = EnvCredentialProvider(
            {"sepolia": "ETHERSCAN_API_KEY", "polygonAmoy": "OKLINK_API_KEY"},
            environ={"ETHERSCAN_API_KEY": "abc"},
        )
        assert provider.api_key("sepolia") == "abc"
        assert provider.api_key("polygonAmoy") == ""
        assert provider.api_key("localhost") == ""

    def test_static_provider(self) -> None:
        provider = StaticCredentialProvider({"sepolia": "k"})
        assert provider.api_key("sepolia") == "k"
        assert provider.api_key("polygon") == ""


class TestConstructorArgFiles:
    def test_json_file(self) -> None:
        args = load_constructor_args(REPO_ROOT / "constructor-args" / "perk-constructor-args.json")
        assert args[0] == "BIZPERKTEST"
        assert args[2] == "10000000000000"
        assert len(args) == 6

    def test_python_literal_file(self) -> None:
        args = load_constructor_args(REPO_ROOT / "constructor-args" / "perk-deploy-args.py")
        assert args[:3] == ["TOKENTEST", "SYMB", 1000000000000]

    def test_python_file_is_not_executed(self, tmp_path: Path) -> None:
        path = tmp_path / "args.py"
        path.write_text("import os\nconstructor_args = [os.getcwd()]\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="literal"):
            load_constructor_args(path)

    def test_python_file_without_assignment(self, tmp_path: Path) -> None:
        path = tmp_path / "args.py"
        path.write_text("args = [1]\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="constructor_args"):
            load_constructor_args(path)

    def test_json_object_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "args.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a list"):
            load_constructor_args(path)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "args.ts"
        path.write_text("export default []", encoding="utf-8")
        with pytest.raises(ConfigError, match="Unsupported"):
            load_constructor_args(path)

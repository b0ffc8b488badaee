"""
Tests for notary client configuration loading.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from notarytool.config import NotaryConfig, get_config, load_config, reset_config, set_config
from notarytool.config.config import _expand_env_vars

ENV_VARS = (
    "NOTARYTOOL_CONFIG",
    "NOTARYTOOL_KEY_ID",
    "NOTARYTOOL_ISSUER_ID",
    "NOTARYTOOL_PRIVATE_KEY_FILE",
    "TEST_NOTARY_KEY_ID",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


def write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "notarytool.yaml"
    path.write_text(body)
    return path


class TestLoadConfig:

    def test_from_yaml(self, tmp_path):
        path = write_config(
            tmp_path,
            "notarytool:\n"
            "  key_id: A8B3X24VG1\n"
            "  issuer_id: 70a7de6a-a537-48e3-a053-5a8a7c22a4a1\n"
            "  private_key_file: ~/keys/AuthKey_A8B3X24VG1.p8\n"
            "  token_lifetime_seconds: 600\n"
            "  read_timeout_seconds: 30\n",
        )
        config = load_config(config_path=path)

        assert config.key_id == "A8B3X24VG1"
        assert config.token_lifetime == timedelta(minutes=10)
        assert config.read_timeout_seconds == 30.0
        assert config.connect_timeout_seconds == 10.0
        assert config.base_url == "https://appstoreconnect.apple.com/notary/v2"
        assert config.private_key_path == Path.home() / "keys" / "AuthKey_A8B3X24VG1.p8"

    def test_default_file_in_cwd(self, tmp_path):
        write_config(
            tmp_path,
            "notarytool:\n  key_id: K\n  issuer_id: I\n  private_key_file: k.p8\n",
        )
        assert load_config().key_id == "K"

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_NOTARY_KEY_ID", "FROM_ENV")
        path = write_config(
            tmp_path,
            "notarytool:\n"
            "  key_id: ${TEST_NOTARY_KEY_ID}\n"
            "  issuer_id: ${TEST_NOTARY_ISSUER:-default-issuer}\n"
            "  private_key_file: k.p8\n",
        )
        config = load_config(config_path=path)
        assert config.key_id == "FROM_ENV"
        assert config.issuer_id == "default-issuer"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NOTARYTOOL_KEY_ID", "ENVKEY")
        path = write_config(
            tmp_path,
            "notarytool:\n  key_id: YAMLKEY\n  issuer_id: I\n  private_key_file: k.p8\n",
        )
        assert load_config(config_path=path).key_id == "ENVKEY"

    def test_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NOTARYTOOL_KEY_ID", "ENVKEY")
        path = write_config(
            tmp_path,
            "notarytool:\n  key_id: YAMLKEY\n  issuer_id: I\n  private_key_file: k.p8\n",
        )
        config = load_config(config_path=path, overrides={"key_id": "OVERRIDE", "read_timeout_seconds": 5})
        assert config.key_id == "OVERRIDE"
        assert config.read_timeout_seconds == 5.0

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text(
            "NOTARYTOOL_KEY_ID=DOTENV\nNOTARYTOOL_ISSUER_ID=I\nNOTARYTOOL_PRIVATE_KEY_FILE=k.p8\n"
        )
        config = load_config()
        assert config.key_id == "DOTENV"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "missing.yaml")

    def test_missing_required_setting(self, tmp_path):
        path = write_config(tmp_path, "notarytool:\n  key_id: K\n")
        with pytest.raises(ValueError, match="issuer_id"):
            load_config(config_path=path)


class TestNotaryConfigValidate:

    def valid(self, **kwargs) -> NotaryConfig:
        defaults = {"key_id": "K", "issuer_id": "I", "private_key_file": "k.p8"}
        defaults.update(kwargs)
        return NotaryConfig(**defaults)

    def test_valid(self):
        self.valid().validate()

    @pytest.mark.parametrize("lifetime", [0, 1201])
    def test_lifetime_range(self, lifetime):
        with pytest.raises(ValueError, match="token_lifetime_seconds"):
            self.valid(token_lifetime_seconds=lifetime).validate()

    def test_timeouts_positive(self):
        with pytest.raises(ValueError, match="connect_timeout_seconds"):
            self.valid(connect_timeout_seconds=0).validate()

    def test_base_url_scheme(self):
        with pytest.raises(ValueError, match="base_url"):
            self.valid(base_url="ftp://example.test").validate()

    def test_types_coerced(self):
        config = self.valid(token_lifetime_seconds="300", read_timeout_seconds="12.5")
        assert config.token_lifetime_seconds == 300
        assert config.read_timeout_seconds == 12.5


class TestSingleton:

    def test_set_and_get(self):
        config = NotaryConfig(key_id="K", issuer_id="I", private_key_file="k.p8")
        set_config(config)
        assert get_config() is config

    def test_get_loads_once(self, tmp_path):
        write_config(
            tmp_path,
            "notarytool:\n  key_id: K\n  issuer_id: I\n  private_key_file: k.p8\n",
        )
        assert get_config() is get_config()


class TestExpandEnvVars:

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("TEST_NOTARY_KEY_ID", "X")
        assert _expand_env_vars({"a": ["${TEST_NOTARY_KEY_ID}", 3]}) == {"a": ["X", 3]}

    def test_unset_without_default_left_as_is(self):
        assert _expand_env_vars("${TEST_NOTARY_KEY_ID}") == "${TEST_NOTARY_KEY_ID}"

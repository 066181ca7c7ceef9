"""Tests for the Configuration Store."""
import pytest

from dirconf.config_store import (
    ConfigStore,
    MainConfig,
    ProfileSettings,
    StoreError,
    get_default_base_dir,
)


class TestSettingsModels:
    """Tests for the settings shapes."""

    def test_main_config_defaults(self):
        """MainConfig has sensible defaults."""
        config = MainConfig()
        assert config.password == ""
        assert config.default_profile is None
        assert config.allowed_hosts == []

    def test_main_config_keeps_unknown_keys(self):
        """Keys written by newer versions survive a dump."""
        config = MainConfig.model_validate({"session_timeout": 60, "mailServer": "smtp.example.org"})

        dumped = config.model_dump(mode="json")

        assert dumped["session_timeout"] == 60
        assert dumped["mailServer"] == "smtp.example.org"

    def test_profile_to_dict_omits_name(self):
        """The profile name is the file name, not part of the body."""
        profile = ProfileSettings(name="lam", server_url="ldaps://ldap.example.org")

        data = profile.to_dict()

        assert "name" not in data
        assert data["server_url"] == "ldaps://ldap.example.org"

    def test_profile_from_dict_uses_given_name(self):
        """A name inside the body never overrides the key."""
        profile = ProfileSettings.from_dict("real", {"name": "other", "cache_timeout": 10})

        assert profile.name == "real"
        assert profile.cache_timeout == 10


class TestConfigStore:
    """Tests for ConfigStore."""

    @pytest.fixture
    def temp_store(self, tmp_path):
        """Create a ConfigStore with a temporary directory."""
        return ConfigStore(base_dir=tmp_path)

    def test_directory_creation(self, tmp_path):
        """Test that directories are created on init."""
        ConfigStore(base_dir=tmp_path)

        assert (tmp_path / "profiles").exists()
        assert (tmp_path / "templates").exists()

    def test_default_base_dir_from_env(self, tmp_path, monkeypatch):
        """DIRCONF_HOME selects the store directory."""
        monkeypatch.setenv("DIRCONF_HOME", str(tmp_path / "home"))

        assert get_default_base_dir() == tmp_path / "home"

        store = ConfigStore()
        assert store.base_dir == tmp_path / "home"

    def test_main_config_missing_returns_defaults(self, temp_store):
        """No saved main config yields the defaults."""
        assert temp_store.load_main_config() == MainConfig()

    def test_save_and_load_main_config(self, temp_store):
        """Test saving and retrieving the main config."""
        config = MainConfig(password="{SSHA}abc", allowed_hosts=["10.0.0.1"], session_timeout=45)

        temp_store.save_main_config(config)

        assert temp_store.load_main_config() == config

    def test_corrupt_main_config_raises(self, temp_store):
        """Unreadable main config is an error, not silently defaulted."""
        temp_store.main_config_path.write_text("session_timeout: [unclosed\n")

        with pytest.raises(StoreError):
            temp_store.load_main_config()

    def test_certificates(self, temp_store):
        """Certificates are stored as raw bytes; empty removes them."""
        assert temp_store.load_certificates() == b""

        pem = b"-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"
        temp_store.save_certificates(pem)
        assert temp_store.load_certificates() == pem

        temp_store.save_certificates(b"")
        assert temp_store.load_certificates() == b""
        assert not temp_store.certificates_path.exists()

    def test_save_and_list_profiles(self, temp_store):
        """Test profile management."""
        assert temp_store.save_profile(ProfileSettings(name="prod", active_types=["user"]))
        assert temp_store.save_profile(ProfileSettings(name="lam", active_types=["user", "group"]))

        assert temp_store.list_profiles() == ["lam", "prod"]

        retrieved = temp_store.load_profile("lam")
        assert retrieved.name == "lam"
        assert temp_store.list_active_types("lam") == ["user", "group"]

    def test_load_missing_profile(self, temp_store):
        """Test getting a profile that doesn't exist."""
        with pytest.raises(StoreError) as exc:
            temp_store.load_profile("nonexistent")

        assert "not found" in str(exc.value)

    @pytest.mark.parametrize("name", ["../escape", ".hidden", "a/b", ""])
    def test_save_profile_invalid_name(self, temp_store, name):
        """Invalid names are reported through the return value."""
        assert temp_store.save_profile(ProfileSettings(name=name)) is False

    def test_templates(self, temp_store):
        """Test account template management."""
        template = {"posixAccount_loginShell": "/bin/bash", "inetOrgPerson_o": "Example"}

        assert temp_store.save_template("lam", "user", "default", template)
        assert temp_store.save_template("lam", "user", "admins", {"posixAccount_group": "admins"})

        assert temp_store.list_templates("lam", "user") == ["admins", "default"]
        assert temp_store.list_templates("lam", "group") == []
        assert temp_store.load_template("lam", "user", "default") == template

    def test_load_missing_template(self, temp_store):
        with pytest.raises(StoreError):
            temp_store.load_template("lam", "user", "nope")

    def test_save_template_invalid_name(self, temp_store):
        assert temp_store.save_template("lam", "user", "../../main", {}) is False
        assert not (temp_store.base_dir / "main.yaml").exists()

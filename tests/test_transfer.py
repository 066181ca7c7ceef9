"""End-to-end tests: export, rebuild and re-import configuration state."""
import json

import pytest

from dirconf.config_store import ConfigStore, MainConfig, ProfileSettings
from dirconf.transfer import (
    ConfigExporter,
    ExportError,
    FormatError,
    TransferEngine,
    UnitIdentity,
    UnitKind,
    activate,
    activate_all,
    summarize_units,
)

PEM = b"-----BEGIN CERTIFICATE-----\nMIIBszCCAVmgAwIBAgIU\n-----END CERTIFICATE-----\n"


def populate(store: ConfigStore) -> None:
    """Fill a store with a small but complete installation."""
    store.save_main_config(MainConfig(
        password="{SSHA}secret",
        default_profile="lam",
        allowed_hosts=["10.0.0.0/8"],
        mailServer="smtp.example.org",
    ))
    store.save_certificates(PEM)
    store.save_profile(ProfileSettings(
        name="lam",
        server_url="ldaps://ldap.example.org:636",
        admins=["cn=admin,dc=example,dc=org"],
        suffixes={"user": "ou=People,dc=example,dc=org", "group": "ou=group,dc=example,dc=org"},
        list_attributes={"user": ["#uid", "#cn"]},
        module_settings={"posixAccount_minUID": [10000]},
        active_types=["user", "group"],
    ))
    store.save_profile(ProfileSettings(name="backup", active_types=["user"]))
    store.save_template("lam", "user", "default", {"posixAccount_loginShell": "/bin/bash"})
    store.save_template("lam", "user", "admins", {"posixAccount_group": "wheel", "quota": [1, 2]})
    store.save_template("lam", "group", "default", {"posixGroup_gidNumber": 100})
    store.save_template("backup", "user", "default", {"inetOrgPerson_o": "Backup"})


def assert_same_state(left: ConfigStore, right: ConfigStore) -> None:
    assert left.load_main_config() == right.load_main_config()
    assert left.load_certificates() == right.load_certificates()
    assert left.list_profiles() == right.list_profiles()
    for name in left.list_profiles():
        assert left.load_profile(name) == right.load_profile(name)
        for type_id in left.list_active_types(name):
            assert left.list_templates(name, type_id) == right.list_templates(name, type_id)
            for template in left.list_templates(name, type_id):
                assert left.load_template(name, type_id, template) == \
                    right.load_template(name, type_id, template)


class TestConfigExporter:
    """Tests for ConfigExporter."""

    def test_empty_store_exports_every_section(self, tmp_path):
        snapshot = ConfigExporter(ConfigStore(tmp_path)).export()

        assert list(snapshot) == ["mainConfig", "certificates", "serverProfiles", "accountProfiles"]
        assert snapshot["mainConfig"] == MainConfig().model_dump(mode="json")
        assert snapshot["certificates"] == ""
        assert snapshot["serverProfiles"] == {}
        assert snapshot["accountProfiles"] == {}

    def test_export_contents(self, tmp_path):
        store = ConfigStore(tmp_path)
        populate(store)

        snapshot = ConfigExporter(store).export()

        assert list(snapshot["serverProfiles"]) == ["backup", "lam"]
        assert snapshot["accountProfiles"]["lam"]["user"]["admins"] == {
            "posixAccount_group": "wheel", "quota": [1, 2],
        }
        assert snapshot["accountProfiles"]["backup"] == {
            "user": {"default": {"inetOrgPerson_o": "Backup"}},
        }

    def test_only_active_types_are_exported(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.save_profile(ProfileSettings(name="lam", active_types=["user"]))
        store.save_template("lam", "user", "default", {"a": 1})
        store.save_template("lam", "host", "default", {"b": 2})

        snapshot = ConfigExporter(store).export()

        assert snapshot["accountProfiles"] == {"lam": {"user": {"default": {"a": 1}}}}

    def test_export_is_read_only(self, tmp_path):
        store = ConfigStore(tmp_path)
        populate(store)
        before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))

        ConfigExporter(store).export()

        assert sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*")) == before

    def test_unreadable_profile_raises(self, tmp_path):
        store = ConfigStore(tmp_path)
        (store.profiles_dir / "broken.yaml").write_text("server_url: [unclosed\n")

        with pytest.raises(ExportError):
            ConfigExporter(store).export()

    def test_export_json(self, tmp_path):
        store = ConfigStore(tmp_path)
        populate(store)

        document = json.loads(ConfigExporter(store).export_json())

        assert document["mainConfig"]["mailServer"] == "smtp.example.org"


class TestRoundTrip:
    """Export then import reproduces the installation."""

    def test_round_trip(self, tmp_path):
        source = ConfigStore(tmp_path / "source")
        target = ConfigStore(tmp_path / "target")
        populate(source)

        document = TransferEngine(source).export_json()
        engine = TransferEngine(target)
        units = engine.build_units(document)
        activate_all(units)
        engine.apply(units)

        assert_same_state(source, target)
        assert ConfigExporter(target).export() == ConfigExporter(source).export()

    def test_import_twice_is_idempotent(self, tmp_path):
        source = ConfigStore(tmp_path / "source")
        target = ConfigStore(tmp_path / "target")
        populate(source)
        document = TransferEngine(source).export_json()
        engine = TransferEngine(target)

        units = engine.build_units(document)
        activate_all(units)
        first = engine.apply(units)
        state = engine.export_snapshot()

        units = engine.build_units(document)
        activate_all(units)
        second = engine.apply(units)

        assert first.success and second.success
        assert first.applied == second.applied
        assert engine.export_snapshot() == state


class TestTransferEngine:
    """Tests for TransferEngine."""

    @pytest.fixture
    def engine(self, tmp_path):
        source = ConfigStore(tmp_path / "source")
        populate(source)
        return TransferEngine(source)

    def test_dry_run_writes_nothing(self, engine, tmp_path):
        target = TransferEngine(ConfigStore(tmp_path / "target"))
        units = target.build_units(engine.export_json())
        activate_all(units)

        report = target.apply(units, dry_run=True)

        assert report.dry_run
        assert "lam:user:admins" in report.applied
        assert target.store.list_profiles() == []
        assert target.store.load_certificates() == b""

    def test_preview(self, engine):
        units = engine.build_units(engine.export_json())
        activate(units, [UnitIdentity(UnitKind.SERVER_PROFILE, profile_name="lam")])

        summary = engine.preview(units)

        assert "1 selected" in summary
        assert "[x] lam" in summary
        assert "[ ] backup" in summary
        assert "(3 templates)" in summary

    def test_preview_nothing_selected(self, engine):
        units = engine.build_units(engine.export_json())

        assert summarize_units(units) == "Nothing selected for import"

    def test_preview_lists_warnings(self, engine):
        document = json.loads(engine.export_json())
        document["futureSection"] = {}

        units = engine.build_units(json.dumps(document))
        activate_all(units)

        assert engine.warnings == ["Unknown snapshot section 'futureSection' skipped"]
        assert "futureSection" in engine.preview(units)

    def test_structural_errors_before_any_write(self, tmp_path):
        engine = TransferEngine(ConfigStore(tmp_path))

        with pytest.raises(FormatError):
            engine.build_units(json.dumps({"somethingElse": True}))

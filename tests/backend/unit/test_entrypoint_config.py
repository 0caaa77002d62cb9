"""
Unit tests for entrypoint configuration resolution.
"""
import sys

from app.entrypoint.config import BootstrapConfig


class TestSources:
    def test_environment_overrides_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("APP_ENV=staging\nDB_WAIT_TIMEOUT=5\n")
        cfg = BootstrapConfig.from_env({"APP_ENV": "production"}, base_dir=tmp_path)
        assert cfg.app_env == "production"
        assert cfg.db_wait_timeout == 5

    def test_empty_environment_value_falls_back_to_file(self, tmp_path):
        (tmp_path / ".env").write_text("APP_ENV=staging\n")
        cfg = BootstrapConfig.from_env({"APP_ENV": ""}, base_dir=tmp_path)
        assert cfg.app_env == "staging"

    def test_key_sources_are_kept_apart(self, tmp_path):
        (tmp_path / ".env").write_text("APP_KEY=from-file\n")
        cfg = BootstrapConfig.from_env({"APP_KEY": "from-env"}, base_dir=tmp_path)
        assert cfg.file_app_key == "from-file"
        assert cfg.env_app_key == "from-env"
        assert cfg.env_file_exists is True

    def test_missing_env_file(self, tmp_path):
        cfg = BootstrapConfig.from_env({}, base_dir=tmp_path)
        assert cfg.env_file_exists is False
        assert cfg.file_app_key is None

    def test_base_dir_from_environment(self, tmp_path):
        cfg = BootstrapConfig.from_env({"APP_BASE_DIR": str(tmp_path)})
        assert cfg.base_dir == tmp_path


class TestDefaults:
    def test_defaults(self, tmp_path):
        cfg = BootstrapConfig.from_env({}, base_dir=tmp_path)
        assert cfg.app_env == "local"
        assert cfg.db_wait is True
        assert cfg.db_wait_timeout == 30
        assert cfg.db_required is False
        assert cfg.run_migrations is True
        assert cfg.migrations_fail_on_error is False
        assert cfg.run_seeders is True
        assert cfg.force_seed is False
        assert cfg.app_port == 8000
        assert cfg.migrate_command == ["aerich", "upgrade"]
        assert cfg.seed_command == [sys.executable, "-m", "app.seed"]

    def test_flags_accept_common_truthy_values(self, tmp_path):
        cfg = BootstrapConfig.from_env(
            {"DB_REQUIRED": "YES", "FORCE_SEED": "1", "RUN_SEEDERS": "off"},
            base_dir=tmp_path,
        )
        assert cfg.db_required is True
        assert cfg.force_seed is True
        assert cfg.run_seeders is False

    def test_commands_are_shell_split(self, tmp_path):
        cfg = BootstrapConfig.from_env(
            {"MIGRATE_COMMAND": "aerich --app models upgrade"}, base_dir=tmp_path
        )
        assert cfg.migrate_command == ["aerich", "--app", "models", "upgrade"]


class TestDatabaseEndpoint:
    def test_host_and_port_from_database_url(self, tmp_path):
        cfg = BootstrapConfig.from_env(
            {"DATABASE_URL": "postgres://u:p@db.internal:6543/app"}, base_dir=tmp_path
        )
        assert cfg.db_host == "db.internal"
        assert cfg.db_port == 6543

    def test_explicit_host_and_port_win(self, tmp_path):
        cfg = BootstrapConfig.from_env(
            {
                "DATABASE_URL": "postgres://u:p@db.internal:6543/app",
                "DB_HOST": "other",
                "DB_PORT": "5433",
            },
            base_dir=tmp_path,
        )
        assert cfg.db_host == "other"
        assert cfg.db_port == 5433

    def test_sqlite_url_has_no_host(self, tmp_path):
        cfg = BootstrapConfig.from_env({"DATABASE_URL": "sqlite:///data/app.db"}, base_dir=tmp_path)
        assert cfg.db_host is None


class TestDerivedPaths:
    def test_seed_marker_is_per_environment(self, tmp_path):
        prod = BootstrapConfig.from_env({"APP_ENV": "production"}, base_dir=tmp_path)
        local = BootstrapConfig.from_env({"APP_ENV": "local"}, base_dir=tmp_path)
        assert prod.seed_marker != local.seed_marker
        assert prod.seed_marker.name == ".seeded-production"

    def test_production_like(self, tmp_path):
        assert BootstrapConfig.from_env({"APP_ENV": "production"}, base_dir=tmp_path).production_like
        assert BootstrapConfig.from_env({"APP_ENV": "staging"}, base_dir=tmp_path).production_like
        assert not BootstrapConfig.from_env({"APP_ENV": "local"}, base_dir=tmp_path).production_like


class TestMalformedValues:
    def test_bad_integers_fall_back_to_defaults(self, tmp_path, caplog):
        environ = {"DB_WAIT_TIMEOUT": "30s", "DB_PORT": "pg", "APP_PORT": "eighty", "WEB_CONCURRENCY": "auto"}
        with caplog.at_level("WARNING", logger="app.entrypoint.config"):
            cfg = BootstrapConfig.from_env(environ, base_dir=tmp_path)
        assert cfg.db_wait_timeout == 30
        assert cfg.db_port == 5432
        assert cfg.app_port == 8000
        assert cfg.web_concurrency == 2
        assert "DB_WAIT_TIMEOUT" in caplog.text

    def test_unparseable_command_falls_back(self, tmp_path):
        cfg = BootstrapConfig.from_env({"MIGRATE_COMMAND": 'aerich "upgrade'}, base_dir=tmp_path)
        assert cfg.migrate_command == ["aerich", "upgrade"]

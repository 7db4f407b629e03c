from click.testing import CliRunner

import dualrotate.cli as cli_module


def _fake_rotator(captured, exit_code=0):
    class FakeRotator:
        OPERATIONS = cli_module.PasswordRotator.OPERATIONS

        def __init__(self, **kwargs):
            captured.update(kwargs)

        def run(self):
            return exit_code

    return FakeRotator


def test_cli_uses_config_and_allows_cli_override(tmp_path, monkeypatch):
    config_file = tmp_path / ".dualrotate.yml"
    config_file.write_text(
        "runtime: docker\n"
        "timeout: 45\n"
        "target:\n"
        "  workload: config-mysql\n"
        "  user: root\n"
        "  host: 127.0.0.1\n"
        "  password: r00t\n"
        "users:\n"
        "  - username: app\n"
        "    hosts: ['%']\n"
        "    password_env: APP_PASSWORD\n",
        encoding="utf-8",
    )

    captured = {}
    monkeypatch.setattr(cli_module, "PasswordRotator", _fake_rotator(captured))
    monkeypatch.setenv("APP_PASSWORD", "n3w")

    runner = CliRunner()
    result = runner.invoke(
        cli_module.main,
        ["rotate", "--config", str(config_file), "--workload", "cli-mysql", "--dry-run"],
    )

    assert result.exit_code == 0, result.output
    assert captured["operation"] == "rotate"
    assert captured["workload"] == "cli-mysql"
    assert captured["runtime"] == "docker"
    assert captured["timeout"] == 45.0
    assert captured["password"] == "r00t"
    assert captured["dry_run"] is True
    assert captured["users"][0].username == "app"
    assert captured["users"][0].password == "n3w"


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch):
    default_config = tmp_path / ".dualrotate.yml"
    default_config.write_text(
        "target:\n"
        "  workload: mysql-0\n"
        "  user: operator\n"
        "  host: localhost\n"
        "  password: op\n"
        "users:\n"
        "  - username: app\n"
        "    hosts: ['%']\n",
        encoding="utf-8",
    )

    captured = {}
    monkeypatch.setattr(cli_module, "PasswordRotator", _fake_rotator(captured))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, ["discard"])

    assert result.exit_code == 0, result.output
    assert captured["operation"] == "discard"
    assert captured["workload"] == "mysql-0"
    assert captured["runtime"] == "kubectl"
    assert captured["container"] == "mysql"


def test_cli_password_env_overrides_config_password(tmp_path, monkeypatch):
    config_file = tmp_path / "rotate.yml"
    config_file.write_text("target:\n  password: from-config\n", encoding="utf-8")

    captured = {}
    monkeypatch.setattr(cli_module, "PasswordRotator", _fake_rotator(captured))
    monkeypatch.setenv("ADMIN_PW", "from-env")

    result = CliRunner().invoke(
        cli_module.main,
        ["discard", "--config", str(config_file), "--password-env", "ADMIN_PW"],
    )

    assert result.exit_code == 0, result.output
    assert captured["password"] == "from-env"


def test_cli_propagates_rotator_exit_code(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "PasswordRotator", _fake_rotator({}, exit_code=2))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, ["rotate"])

    assert result.exit_code == 2


def test_cli_reports_config_errors(tmp_path):
    config_file = tmp_path / "bad.yml"
    config_file.write_text("unknown: 1\n", encoding="utf-8")

    result = CliRunner().invoke(cli_module.main, ["rotate", "--config", str(config_file)])

    assert result.exit_code != 0
    assert "Unknown configuration keys" in result.output


def test_cli_reports_non_numeric_timeout(tmp_path):
    config_file = tmp_path / "bad-timeout.yml"
    config_file.write_text("timeout: soon\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli_module.main, ["discard", "--config", str(config_file), "--dry-run"]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "`timeout` must be a number of seconds" in result.output

"""Test CLI entrypoint."""

from datetime import date
from unittest.mock import patch

import pytest

from tarsweep.retention.cleanup import CleanupResult, ExecutionMode
from tarsweep.retention.policy import RetentionPolicy


@pytest.fixture(autouse=True)
def no_log_reconfigure():
    """Keep the CLI from replacing loguru sinks during tests."""
    with patch("tarsweep.cli.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def tarsnap_found():
    with patch("shutil.which", return_value="/usr/bin/tarsnap"):
        yield


def ok_result(name="web", mode=ExecutionMode.DRY_RUN):
    return CleanupResult(target=name, mode=mode, deleted=["web-2024-01-01"], kept=["web-2024-03-10"])


def test_cli_module_imports():
    """CLI module should import without error."""
    from tarsweep import cli
    assert hasattr(cli, "main")


def test_cli_main_is_callable():
    """CLI main should be callable."""
    from tarsweep.cli import main
    assert callable(main)


class TestMain:
    """Tests for tarsweep.cli.main()."""

    def test_dry_run_by_default(self, tmp_path, tarsnap_found, capsys):
        """Without --really the run is a dry run over the key dir."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={"web": ok_result()}) as run:
            code = main(["--key-dir", str(tmp_path), "--cache-dir", str(tmp_path / "c")])

        assert code == 0
        args, kwargs = run.call_args
        assert args[0] == tmp_path
        assert args[1] == tmp_path / "c"
        assert args[2] == RetentionPolicy(daily_keep=7, weekly_keep=12)
        assert kwargs["mode"] is ExecutionMode.DRY_RUN
        assert "web: would delete 1, kept 1" in capsys.readouterr().out

    def test_really_commits(self, tmp_path, tarsnap_found):
        """--really switches to commit mode."""
        from tarsweep.cli import main

        result = ok_result(mode=ExecutionMode.COMMIT)
        with patch("tarsweep.cli.discover_and_run", return_value={"web": result}) as run:
            code = main(["--really", "--key-dir", str(tmp_path)])

        assert code == 0
        assert run.call_args[1]["mode"] is ExecutionMode.COMMIT

    def test_commit_alias(self, tmp_path, tarsnap_found):
        """--commit is an alias of --really."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={}) as run:
            main(["--commit", "--key-dir", str(tmp_path)])

        assert run.call_args[1]["mode"] is ExecutionMode.COMMIT

    def test_policy_and_as_of_options(self, tmp_path, tarsnap_found):
        """--daily, --weekly and --as-of are passed through."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={}) as run:
            main(
                [
                    "--key-dir", str(tmp_path),
                    "--daily", "3",
                    "--weekly", "2",
                    "--as-of", "2024-03-10",
                ]
            )

        assert run.call_args[0][2] == RetentionPolicy(daily_keep=3, weekly_keep=2)
        assert run.call_args[1]["as_of_date"] == date(2024, 3, 10)

    def test_run_settings_passed_through(self, tmp_path, tarsnap_found, monkeypatch):
        """Cache dir, executable and timeout reach the cleanup run."""
        from tarsweep.cli import main

        monkeypatch.setenv("TARSWEEP_TIMEOUT", "30")

        with patch("tarsweep.cli.discover_and_run", return_value={}) as run:
            main(
                [
                    "--key-dir", str(tmp_path),
                    "--cache-dir", str(tmp_path / "c"),
                    "--tarsnap", "/opt/bin/tarsnap",
                    "--daily", "4",
                ]
            )

        args, kwargs = run.call_args
        assert args[1] == tmp_path / "c"
        assert args[2] == RetentionPolicy(daily_keep=4, weekly_keep=12)
        assert kwargs["executable"] == "/opt/bin/tarsnap"
        assert kwargs["timeout"] == 30.0

    def test_explicit_keys(self, tmp_path, tarsnap_found):
        """--key limits the run to the given key files, even without a key dir."""
        from tarsweep.cli import main

        key = tmp_path / "web.cleanup.key"
        with patch("tarsweep.cli.run_cleanup", return_value={"web": ok_result()}) as run:
            code = main(["--key", str(key), "--key-dir", str(tmp_path / "missing")])

        assert code == 0
        assert run.call_args[0][0] == [key]

    def test_invalid_policy(self, tmp_path, capsys):
        """Non-positive tier sizes exit with 1."""
        from tarsweep.cli import main

        code = main(["--key-dir", str(tmp_path), "--daily", "0"])

        assert code == 1
        assert "daily_keep must be positive" in capsys.readouterr().err

    def test_startup_failure(self, tmp_path, capsys):
        """A missing tarsnap binary exits with 1 before any target runs."""
        from tarsweep.cli import main

        with patch("shutil.which", return_value=None):
            with patch("tarsweep.cli.discover_and_run") as run:
                code = main(["--key-dir", str(tmp_path)])

        assert code == 1
        run.assert_not_called()
        assert "tarsnap executable not found" in capsys.readouterr().err

    def test_failed_target_exit_code(self, tmp_path, tarsnap_found, capsys):
        """Any failed target makes the exit code 1."""
        from tarsweep.cli import main

        results = {
            "web": ok_result(),
            "db": CleanupResult(target="db", mode=ExecutionMode.DRY_RUN, errors=["fsck failed"]),
        }
        with patch("tarsweep.cli.discover_and_run", return_value=results):
            code = main(["--key-dir", str(tmp_path)])

        assert code == 1
        assert "db: would delete 0, kept 0, unparseable 0 - FAILED (1 errors)" in capsys.readouterr().out

    def test_duplicate_target_names_exit_code(self, tmp_path, tarsnap_found):
        """Two keys with the same target name make the run fail."""
        from tarsweep.cli import main

        for sub in ("a", "b"):
            (tmp_path / sub).mkdir()
            (tmp_path / sub / "web.cleanup.key").write_text("k")

        with patch("tarsweep.retention.cleanup.TarsnapClient") as client_cls:
            client_cls.return_value.list_archives.return_value = []
            code = main(["--key-dir", str(tmp_path), "--cache-dir", str(tmp_path / "c")])

        assert code == 1
        assert client_cls.call_count == 1

    def test_no_keys_found(self, tmp_path, tarsnap_found, capsys):
        """An empty key directory is not an error."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={}):
            code = main(["--key-dir", str(tmp_path)])

        assert code == 0
        assert "No cleanup keys found" in capsys.readouterr().out

    def test_quiet_suppresses_summary(self, tmp_path, tarsnap_found, capsys, no_log_reconfigure):
        """--quiet logs errors only and prints no summary."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={"web": ok_result()}):
            main(["--quiet", "--key-dir", str(tmp_path)])

        no_log_reconfigure.assert_called_once_with("ERROR")
        assert capsys.readouterr().out == ""

    def test_verbose_logging(self, tmp_path, tarsnap_found, no_log_reconfigure):
        """--verbose enables debug logging."""
        from tarsweep.cli import main

        with patch("tarsweep.cli.discover_and_run", return_value={}):
            main(["--verbose", "--key-dir", str(tmp_path)])

        no_log_reconfigure.assert_called_once_with("DEBUG")

    def test_env_defaults(self, tmp_path, tarsnap_found, monkeypatch):
        """Defaults come from TARSWEEP_* variables."""
        from tarsweep.cli import main

        monkeypatch.setenv("TARSWEEP_KEY_DIR", str(tmp_path))
        monkeypatch.setenv("TARSWEEP_DAILY_KEEP", "5")

        with patch("tarsweep.cli.discover_and_run", return_value={}) as run:
            main([])

        assert run.call_args[0][0] == tmp_path
        assert run.call_args[0][2].daily_keep == 5

"""Contract tests for the command-line entry point."""

import logging

import pytest

from autofee.main import main


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    """Point storage and logs at a temporary directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUTOFEE_STORAGE_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "server.log"))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("AUTOFEE_STORAGE_KEY", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level
    yield tmp_path
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


class TestCli:
    def test_sample_calculate_statement(self, capsys):
        assert main(["sample"]) == 0
        assert main(
            ["calculate", "2024", "2", "--electricity", "47440", "--water", "17440",
             "--total-fee", "288510"]
        ) == 0
        assert main(["statement", "2024", "2", "--unit", "601A"]) == 0

        out = capsys.readouterr().out
        assert "Saved 4 sample readings" in out
        assert "Calculated 2 bills" in out
        assert "₩114,995" in out

    def test_data_persists_between_runs(self, capsys):
        main(["add-unit", "701", "701호", "84"])
        capsys.readouterr()

        assert main(["units"]) == 0
        assert "701호" in capsys.readouterr().out

    def test_calculate_without_readings_fails(self, capsys):
        code = main(["calculate", "2024", "2", "--electricity", "1", "--water", "1",
                     "--management", "1"])

        assert code == 1
        assert "No meter readings" in capsys.readouterr().err

    def test_invalid_reading_fails(self, capsys):
        code = main(["reading", "2024", "2", "601A", "-10", "5"])

        assert code == 1
        assert "negative" in capsys.readouterr().err

    def test_delete_unit(self, capsys):
        assert main(["delete-unit", "601B"]) == 0
        capsys.readouterr()

        main(["units"])
        out = capsys.readouterr().out
        assert "601B" not in out
        assert "1 units" in out

    def test_export_import(self, cli_env, capsys):
        backup = cli_env / "backup.db"
        main(["sample"])
        assert main(["export", str(backup)]) == 0
        assert main(["clear"]) == 0
        assert main(["import", str(backup)]) == 0
        assert main(["calculate", "2024", "2", "--electricity", "47440", "--water", "17440",
                     "--management", "223630"]) == 0
        assert main(["summary", "2024-01", "2024-02"]) == 0

        assert "288,510" in capsys.readouterr().out

    def test_invalid_port_configuration(self, monkeypatch, capsys):
        monkeypatch.setenv("PORT", "not-a-port")

        assert main(["units"]) == 1
        assert "Configuration error" in capsys.readouterr().err

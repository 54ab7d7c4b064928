import pytest

from app.main import parse_args, run


@pytest.mark.unit
def test_cli_dry_run_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    exit_code = run(["--dry-run-startup"])
    assert exit_code == 0


@pytest.mark.unit
def test_cli_parses_host_and_port() -> None:
    args = parse_args(["--host", "127.0.0.1", "--port", "9000"])
    assert args.host == "127.0.0.1"
    assert args.port == 9000
    assert args.dry_run_startup is False

import pytest

from app.clients.simulator import ProcessorSettings
from app.settings import PipelineSettings, RuntimeSettings, runtime_settings_from_env

ENV_NAMES = (
    "DATABASE_URL",
    "SUBMIT_MAX_RETRIES",
    "SUBMIT_TIME_UNIT_SECONDS",
    "SUBMIT_REPLAY_WAIT_SECONDS",
    "SUBMIT_REPLAY_POLL_SECONDS",
    "PROCESSOR_SUCCESS_WEIGHT",
    "PROCESSOR_FAILURE_WEIGHT",
    "PROCESSOR_DELAYED_WEIGHT",
    "PROCESSOR_DELAY_MIN_UNITS",
    "PROCESSOR_DELAY_MAX_UNITS",
    "PROCESSOR_SEED",
    "SUBMISSIONS_LIST_LIMIT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_runtime_settings_read_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://app:app@db:5432/app")
    monkeypatch.setenv("SUBMIT_MAX_RETRIES", "5")
    monkeypatch.setenv("SUBMIT_TIME_UNIT_SECONDS", "0.01")
    monkeypatch.setenv("SUBMIT_REPLAY_WAIT_SECONDS", "0")
    monkeypatch.setenv("PROCESSOR_SUCCESS_WEIGHT", "1")
    monkeypatch.setenv("PROCESSOR_FAILURE_WEIGHT", "0")
    monkeypatch.setenv("PROCESSOR_SEED", "42")
    monkeypatch.setenv("SUBMISSIONS_LIST_LIMIT", "10")

    settings = runtime_settings_from_env()

    assert settings.database_url == "postgres://app:app@db:5432/app"
    assert settings.list_limit == 10
    assert settings.processor_seed == 42
    assert settings.pipeline == PipelineSettings(
        max_retries=5,
        time_unit_seconds=0.01,
        replay_wait_seconds=0.0,
        replay_poll_seconds=0.5,
    )
    assert settings.processor.success_weight == 1.0
    assert settings.processor.failure_weight == 0.0
    assert settings.processor.time_unit_seconds == 0.01


@pytest.mark.unit
def test_runtime_settings_fall_back_on_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBMIT_MAX_RETRIES", "abc")
    monkeypatch.setenv("SUBMIT_TIME_UNIT_SECONDS", "-1")
    monkeypatch.setenv("PROCESSOR_DELAYED_WEIGHT", "lots")
    monkeypatch.setenv("PROCESSOR_SEED", "seed")
    monkeypatch.setenv("SUBMISSIONS_LIST_LIMIT", "0")
    monkeypatch.setenv("SUBMIT_REPLAY_WAIT_SECONDS", "inf")

    settings = runtime_settings_from_env()

    assert settings == RuntimeSettings()
    assert settings.processor == ProcessorSettings()


@pytest.mark.unit
def test_all_zero_processor_weights_fall_back_to_default_table(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBMIT_TIME_UNIT_SECONDS", "0.5")
    monkeypatch.setenv("PROCESSOR_SUCCESS_WEIGHT", "0")
    monkeypatch.setenv("PROCESSOR_FAILURE_WEIGHT", "0")
    monkeypatch.setenv("PROCESSOR_DELAYED_WEIGHT", "0")

    settings = runtime_settings_from_env()

    assert settings.processor == ProcessorSettings(time_unit_seconds=0.5)


@pytest.mark.unit
def test_inverted_delay_range_falls_back_to_default_table(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROCESSOR_SUCCESS_WEIGHT", "1")
    monkeypatch.setenv("PROCESSOR_DELAY_MIN_UNITS", "20")
    monkeypatch.setenv("PROCESSOR_DELAY_MAX_UNITS", "2")

    settings = runtime_settings_from_env()

    assert settings.processor == ProcessorSettings()

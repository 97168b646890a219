from __future__ import annotations

import pytest
from pydantic import ValidationError

from dosage_mapping.config import ENV_ATOMIC_WRITES, ENV_LOG_LEVEL, MappingSettings


class TestMappingSettings:
    def test_defaults(self) -> None:
        settings = MappingSettings()
        assert settings.atomic_writes is True
        assert settings.log_level == "WARNING"

    def test_log_level_is_normalised(self) -> None:
        assert MappingSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level(self) -> None:
        with pytest.raises(ValidationError):
            MappingSettings(log_level="loud")

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            MappingSettings().atomic_writes = False


class TestFromEnv:
    def test_empty_environment(self) -> None:
        assert MappingSettings.from_env({}) == MappingSettings()

    @pytest.mark.parametrize("raw", ["0", "false", "No", " OFF "])
    def test_atomic_writes_disabled(self, raw: str) -> None:
        settings = MappingSettings.from_env({ENV_ATOMIC_WRITES: raw})
        assert settings.atomic_writes is False

    @pytest.mark.parametrize("raw", ["1", "true", "yes"])
    def test_atomic_writes_enabled(self, raw: str) -> None:
        settings = MappingSettings.from_env({ENV_ATOMIC_WRITES: raw})
        assert settings.atomic_writes is True

    def test_log_level(self) -> None:
        settings = MappingSettings.from_env({ENV_LOG_LEVEL: "info"})
        assert settings.log_level == "INFO"

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_ATOMIC_WRITES, "false")
        monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
        assert MappingSettings.from_env().atomic_writes is False

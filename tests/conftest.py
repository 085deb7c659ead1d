import os

import pytest

# Deterministic, offline tests: no tracing backend, no ambient credentials
os.environ["LANGFUSE_ENABLED"] = "0"
for _name in ("OPENAI_API_KEY", "ASSISTANT_ID", "MODEL", "OPENAI_MODEL", "OPENAI_URL"):
    os.environ.pop(_name, None)

from shared.settings import Settings  # noqa: E402


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = {
            "openai_api_key": "sk-test",
            "assistant_id": "",
            "model": "gpt-4o-mini",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make

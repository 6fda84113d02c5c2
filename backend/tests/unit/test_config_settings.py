"""Unit tests for application settings configuration."""

from pathlib import Path

from synapse_capture.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_openrouter_configured_requires_a_real_key():
    assert Settings(openrouter_api_key="sk-or-v1-abc").openrouter_configured is True
    assert Settings(openrouter_api_key="").openrouter_configured is False
    assert Settings(openrouter_api_key="   ").openrouter_configured is False
    assert Settings(openrouter_api_key="your-openrouter-api-key-here").openrouter_configured is False


def test_search_defaults():
    settings = Settings(_env_file=None)

    assert settings.search_candidate_limit == 500
    assert settings.search_embedding_timeout > 0
    assert settings.search_semantic_deadline >= settings.search_embedding_timeout

import pytest

from config import StoryConfig
from debug import diagnose, main

ENV_VARS = ["OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL", "STORY_FINAL_STEP", "ALLOWED_ORIGINS", "LOG_LEVEL"]


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so values loaded from .env files are undone after the test
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults():
    config = StoryConfig()

    assert config.api_key is None
    assert config.model == "gpt-4o-mini"
    assert config.final_step == 5
    assert config.allowed_origins == ["*"]


def test_from_env(clean_env, tmp_path):
    clean_env.setenv("OPENAI_API_KEY", "sk-abc")
    clean_env.setenv("OPENAI_MODEL", "gpt-4o")
    clean_env.setenv("STORY_FINAL_STEP", "7")
    clean_env.setenv("ALLOWED_ORIGINS", "http://localhost:5173, https://example.com")

    config = StoryConfig.from_env(str(tmp_path / "missing.env"))

    assert config.api_key == "sk-abc"
    assert config.model == "gpt-4o"
    assert config.base_url is None
    assert config.final_step == 7
    assert config.allowed_origins == ["http://localhost:5173", "https://example.com"]


def test_from_env_reads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_API_KEY=gsk_fromfile\nOPENAI_BASE_URL=https://api.groq.com/openai/v1\n")

    config = StoryConfig.from_env(str(env_file))

    assert config.api_key == "gsk_fromfile"
    assert config.base_url == "https://api.groq.com/openai/v1"


def test_from_env_override_prefers_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_API_KEY=sk-fromfile\n")
    clean_env.setenv("OPENAI_API_KEY", "sk-stale")

    assert StoryConfig.from_env(str(env_file)).api_key == "sk-stale"
    assert StoryConfig.from_env(str(env_file), override=True).api_key == "sk-fromfile"


def test_diagnostic_report_reads_current_dotenv(clean_env, tmp_path, capsys):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_API_KEY=sk-fromfile123\n")
    clean_env.setenv("OPENAI_API_KEY", "gsk_stale")

    main(str(env_file))

    out = capsys.readouterr().out
    assert "sk-fromfil" in out
    assert "gsk_stale" not in out


def test_final_step_must_be_positive():
    with pytest.raises(ValueError):
        StoryConfig(final_step=0)


class TestDiagnose:
    def test_missing_key(self):
        report = diagnose(StoryConfig())
        assert report[0].startswith("❌ FAILURE")

    def test_openai_key(self):
        report = diagnose(StoryConfig(api_key="sk-1234567890abcdef"))

        assert report[0].startswith("✅ SUCCESS")
        assert "sk-1234567..." in report[1]
        assert "abcdef" not in "".join(report)

    def test_groq_key_without_base_url(self):
        report = diagnose(StoryConfig(api_key="gsk_123456789"))

        assert any("OPENAI_BASE_URL" in line for line in report)

    def test_unexpected_key_prefix(self):
        report = diagnose(StoryConfig(api_key="abcd-xyz"))
        assert report[0].startswith("⚠️ WARNING")

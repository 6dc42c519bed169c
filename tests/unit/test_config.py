"""Tests for conflictguard.config: Settings defaults and environment overrides."""

from conflictguard.config import Settings, get_settings


class TestSettings:

    def test_get_settings_returns_instance(self):
        assert isinstance(get_settings(), Settings)

    def test_get_settings_returns_singleton(self):
        assert get_settings() is get_settings()

    def test_llm_defaults(self):
        s = Settings()
        assert s.llm_temperature == 0.2
        assert s.llm_max_tokens == 2000
        assert s.llm_max_retries == 3
        assert s.primary_llm_provider == "anthropic"
        assert s.fallback_llm_provider == "openai"

    def test_limits(self):
        s = Settings()
        assert s.max_document_name_length == 255
        assert s.max_document_content_length == 100_000
        assert s.max_documents_for_analysis == 10
        assert s.ai_retry_after_seconds == 30

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GRAPH_BACKEND", "neo4j")
        monkeypatch.setenv("NEO4J_URI", "bolt://graph:7687")
        monkeypatch.setenv("LLM_MAX_RETRIES", "5")
        s = Settings()
        assert s.graph_backend == "neo4j"
        assert s.neo4j_uri == "bolt://graph:7687"
        assert s.llm_max_retries == 5

    def test_test_environment_uses_memory_backend(self):
        assert get_settings().graph_backend == "memory"

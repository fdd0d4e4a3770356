"""Tests for content_audit/config/settings.py — Settings and api_keys_list."""

from content_audit.config.settings import get_settings


class TestSettings:

    def test_defaults(self, override_settings):
        override_settings()
        s = get_settings()
        assert s.chat_provider == "openai"
        assert s.chat_temperature == 0.2
        assert s.chat_timeout_seconds == 60.0
        assert s.batch_chunk_size == 5
        assert s.candidate_exclusion == "valid_cache"
        assert s.recent_window_days == 7
        assert s.published_only is True
        assert s.log_level == "INFO"

    def test_api_keys_list_single(self, override_settings):
        override_settings(ADMIN_API_KEYS="my-key")
        assert get_settings().api_keys_list == ["my-key"]

    def test_api_keys_list_multiple(self, override_settings):
        override_settings(ADMIN_API_KEYS="key1, key2 , key3")
        assert get_settings().api_keys_list == ["key1", "key2", "key3"]

    def test_api_keys_list_strips_empty(self, override_settings):
        override_settings(ADMIN_API_KEYS="k1,,k2,")
        assert get_settings().api_keys_list == ["k1", "k2"]

    def test_env_override(self, override_settings):
        override_settings(
            BATCH_CHUNK_SIZE="10",
            CANDIDATE_EXCLUSION="recent",
            PUBLISHED_ONLY="false",
            CHAT_PROVIDER="bedrock",
        )
        s = get_settings()
        assert s.batch_chunk_size == 10
        assert s.candidate_exclusion == "recent"
        assert s.published_only is False
        assert s.chat_provider == "bedrock"

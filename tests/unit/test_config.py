"""
Unit tests for configuration management.
"""

import pytest
from unittest.mock import patch
import os


def test_settings_loads_from_environment():
    """Test that settings can be loaded from environment variables."""
    with patch.dict(os.environ, {
        'CLIENT_ID': 'test_client',
        'CLIENT_SECRET': 'test_secret',
        'OAUTH_TOKEN': '{"access_token":"gho_abc"}',
        'OAUTH_SCOPES': '["repo", "workflow"]',
        'PR_TITLE_TEMPLATE': 'TICKET-ID: description',
        'JIRA_BASE_URL': 'https://jira.example.com/browse/',
        'FORGE_TIMEOUT_SECONDS': '2.5',
        'LOG_LEVEL': 'DEBUG',
        'PORT': '8080',
    }):
        from app.config import Settings
        settings = Settings()

        assert settings.client_id == 'test_client'
        assert settings.client_secret == 'test_secret'
        assert settings.oauth_token == '{"access_token":"gho_abc"}'
        assert settings.oauth_scopes == ['repo', 'workflow']
        assert settings.pr_title_template == 'TICKET-ID: description'
        assert settings.jira_base_url == 'https://jira.example.com/browse/'
        assert settings.forge_timeout_seconds == 2.5
        assert settings.log_level == 'DEBUG'
        assert settings.port == 8080


def test_settings_has_default_values():
    """Test that settings have appropriate default values."""
    with patch.dict(os.environ, {
        'CLIENT_ID': 'test_client',
        'CLIENT_SECRET': 'test_secret',
    }):
        from app.config import Settings
        settings = Settings(_env_file=None)

        assert settings.log_level == 'INFO'
        assert settings.port == 7000
        assert settings.oauth_scopes == ['repo', 'read:repo_hook', 'write:discussion', 'workflow']
        assert settings.oauth_state_ttl_seconds == 600
        assert settings.pr_title_template == 'example(JIRA-ID): commit description'
        assert settings.github_api_url == 'https://api.github.com'

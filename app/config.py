"""
Application configuration management.
"""

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from typing import List, Optional

# Export .env into the process environment, where OAUTH_TOKEN is kept
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub OAuth application
    client_id: str = ""
    client_secret: str = ""
    oauth_redirect_url: Optional[str] = None
    oauth_scopes: List[str] = [
        "repo",
        "read:repo_hook",
        "write:discussion",
        "workflow",
    ]
    oauth_state_ttl_seconds: int = 600

    # Previously encoded credential (see app.services.token_codec)
    oauth_token: Optional[str] = None

    # GitHub endpoints
    github_oauth_url: str = "https://github.com/login/oauth"
    github_api_url: str = "https://api.github.com"
    forge_timeout_seconds: float = 10.0

    # Pull request rewriting
    pr_title_template: str = "example(JIRA-ID): commit description"
    pr_reminder_text: str = (
        "Please add a JIRA ticket reference to the pull request title "
        "(for example `ABC-123: commit description`) so it can be linked here."
    )
    jira_base_url: str = "https://jira.atlassian.com/browse/"

    # Application
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 7000

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()

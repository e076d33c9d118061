from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # GitHub REST API
    github_api_url: str = "https://api.github.com"

    # GitHub App - installation-scoped access
    # Private key may be stored with literal "\n" sequences (single-line env var)
    github_app_id: str = ""
    github_app_private_key: str = ""
    github_app_slug: str = ""

    # AI / Anthropic
    anthropic_api_key: str = ""
    summary_model: str = "claude-sonnet-4-20250514"
    summary_max_tokens: int = 4000

    # Activity pipeline
    # Repositories fetched concurrently per batch
    commit_fetch_batch_size: int = 5
    # Per-group AI summaries: at most this many groups, each with at least N commits
    group_summary_limit: int = 5
    group_summary_min_commits: int = 5
    # Trailing window used when a request omits since/until
    default_activity_days: int = 30

    @property
    def github_app_enabled(self) -> bool:
        """Check if the GitHub App is configured (has app id and private key)."""
        return bool(self.github_app_id and self.github_app_private_key)


settings = Settings()

"""Configuration loading from environment variables with validation."""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from myclinic.exceptions import StartupConfigError

# Which settings each job needs, keyed by the env var reported when missing
_REQUIRED = {
    "llm": [("anthropic_api_key", "ANTHROPIC_API_KEY")],
    "mail": [
        ("mail_user", "GMAIL_USER"),
        ("mail_password", "GMAIL_APP_PASSWORD"),
    ],
    "database": [("database_url", "DATABASE_URL")],
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MYCLINIC_",
        case_sensitive=False,
    )

    # Credentials (loaded separately, no prefix)
    anthropic_api_key: str = ""
    mail_user: str = ""
    mail_password: str = ""
    database_url: str = ""
    database_key: str = ""

    # Model settings
    model: str = "claude-sonnet-4-20250514"
    fast_model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 4096
    temperature: float = 0.7

    # Mailbox
    imap_host: str = "imap.gmail.com"
    imap_port: int = 993
    imap_timeout: float = 60.0
    mailbox: str = "INBOX"
    alert_sender: str = "googlealerts-noreply@google.com"

    # Post writing
    posts_per_run: int = 3
    default_word_count: int = 1500
    author_name: str = "Meet Your Clinic"

    # Logging
    log_level: str = "INFO"

    @property
    def database_uri(self) -> URL:
        """SQLAlchemy URL for the row store, with DATABASE_KEY as the password."""
        url = make_url(self.database_url)
        if self.database_key and url.password is None and not url.drivername.startswith("sqlite"):
            url = url.set(password=self.database_key)
        return url

    def missing(self, *groups: str) -> list[str]:
        """Return the env var names that are required by ``groups`` but unset."""
        names: list[str] = []
        for group in groups:
            for attr, env_name in _REQUIRED[group]:
                if not getattr(self, attr):
                    names.append(env_name)

        # Hosted stores need a key unless the URL already carries a password
        if "database" in groups and self.database_url and not self.database_key:
            url = make_url(self.database_url)
            if not url.drivername.startswith("sqlite") and url.password is None:
                names.append("DATABASE_KEY")
        return names

    def require(self, *groups: str) -> None:
        """Raise StartupConfigError listing every missing value in ``groups``."""
        missing = self.missing(*groups)
        if missing:
            raise StartupConfigError(missing)


def get_settings() -> Settings:
    """Load settings from environment and the nearest .env file above the cwd."""
    load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        mail_user=os.getenv("GMAIL_USER", ""),
        mail_password=os.getenv("GMAIL_APP_PASSWORD", ""),
        database_url=os.getenv("DATABASE_URL", ""),
        database_key=os.getenv("DATABASE_KEY", ""),
    )

"""
Shared pytest fixtures for Page Agent tests.

Provides reusable fixtures for:
- Configuration and settings
- Database instances
- Sample pages
- Temporary resources
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest
import yaml

from page_agent.config import Settings
from page_agent.storage import Database
from page_agent.utils.logging import reset_logging


@pytest.fixture(autouse=True)
def reset_logging_state():
    """
    Reset logging configuration before and after each test.

    Handlers bound to a previous test's streams are dropped.
    """
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def clear_env_overrides(monkeypatch):
    """Keep PAGE_AGENT__* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("PAGE_AGENT__"):
            monkeypatch.delenv(key)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Provide test settings with a temporary database path."""
    return Settings(
        storage={"database_path": str(temp_dir / "test.db")},
        logging={"log_to_console": False},
    )


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Write a YAML config pointing at a temporary database."""
    path = temp_dir / "config.yaml"
    with open(path, "w") as f:
        yaml.dump({
            "storage": {"database_path": str(temp_dir / "cli.db")},
            "logging": {"log_to_console": False},
        }, f)
    return path


@pytest.fixture
def database(test_settings: Settings) -> Generator[Database, None, None]:
    """
    Provide an initialized test database.

    Creates a fresh database for each test and closes it afterwards.
    """
    db = Database.create(test_settings)
    yield db
    db.close()


@pytest.fixture
def sample_html() -> str:
    """Provide a sample article page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="description" content="How the platform team plans the spring database upgrade.">
        <meta name="author" content="Meta Author">
        <title>Planning the Database Upgrade</title>
        <script>window.analytics = { track: function () {} };</script>
        <style>.banner { color: red; }</style>
    </head>
    <body>
        <header>
            <nav>
                <a href="/home">Home</a>
                <a href="/blog">Blog</a>
                <a href="/about">About Us</a>
            </nav>
        </header>
        <main>
            <article>
                <h1>Planning the Database Upgrade</h1>
                <p class="byline">By Dana Reyes</p>
                <p>The platform team is moving every service to the new database cluster this spring.
                The upgrade brings faster replication and simpler backups for all teams.</p>
                <h2>Why the upgrade matters</h2>
                <p>Replication lag on the old cluster has caused stale reads during peak traffic.
                The new cluster keeps replicas within a second of the primary database.</p>
                <h2>Your checklist</h2>
                <ul>
                    <li>Review the migration guide before the kickoff meeting</li>
                    <li>Schedule a maintenance window with your team</li>
                </ul>
                <p>You should migrate the database before Friday.</p>
                <h2>Questions</h2>
                <p>Contact the platform team in the usual channel if anything is unclear.</p>
            </article>
        </main>
        <footer>
            <p>&copy; 2024 Example Corp. All rights reserved.</p>
        </footer>
    </body>
    </html>
    """

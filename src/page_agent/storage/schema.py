"""
Database schema definition.

Manages SQLite schema creation and versioning.
"""

from page_agent.utils.logging import get_logger

logger = get_logger(__name__)

# Current schema version
SCHEMA_VERSION = 1


class SchemaManager:
    """
    Manages database schema creation.

    Example:
        >>> SchemaManager(connection).initialize()
    """

    def __init__(self, connection) -> None:
        """
        Initialize schema manager.

        Args:
            connection: SQLite database connection
        """
        self.conn = connection

    def initialize(self) -> None:
        """Create all tables if they don't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        version = self.current_version()

        if version is None:
            self._create_schema_v1()
            self.conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,)
            )
            self.conn.commit()
            logger.info(f"Created schema version {SCHEMA_VERSION}")
        else:
            logger.debug(f"Schema version {version} already exists")

    def current_version(self) -> int | None:
        """Return the applied schema version, if any."""
        cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
        return cursor.fetchone()[0]

    def _create_schema_v1(self) -> None:
        """Create version 1 of the database schema."""

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'backlog'
                    CHECK (status IN ('backlog', 'in_progress', 'done')),
                priority TEXT NOT NULL DEFAULT 'medium'
                    CHECK (priority IN ('low', 'medium', 'high')),
                page_url TEXT,
                notes TEXT,
                created_at TEXT NOT NULL
            )
        """)

        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at)"
        )
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)"
        )

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS page_captures (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT,
                html TEXT NOT NULL,
                insight TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_page_captures_url ON page_captures(url)"
        )

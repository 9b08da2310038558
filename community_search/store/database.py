"""
Database initialization and management for the community content store.
"""

import json
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger("store")


class Database:
    """Manages SQLite database connections and schema."""

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """
        Create and return a database connection.

        Returns:
            SQLite connection object
        """
        if self.connection is None:
            self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self.connection.row_factory = sqlite3.Row
        return self.connection

    def initialize_schema(self):
        """Create all database tables and indexes."""
        conn = self.connect()
        cursor = conn.cursor()

        # Knowledge-base articles
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS content_articles (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                excerpt TEXT,
                author_id TEXT,
                category_id TEXT,
                status TEXT NOT NULL DEFAULT 'draft',
                featured BOOLEAN DEFAULT 0,
                view_count INTEGER DEFAULT 0,
                like_count INTEGER DEFAULT 0,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Q&A questions
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS questions (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                author_id TEXT,
                category_id TEXT,
                status TEXT NOT NULL DEFAULT 'open',
                view_count INTEGER DEFAULT 0,
                answer_count INTEGER DEFAULT 0,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Forum posts
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS forum_posts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                author_id TEXT,
                category_id TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                is_pinned BOOLEAN DEFAULT 0,
                view_count INTEGER DEFAULT 0,
                reply_count INTEGER DEFAULT 0,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Feature requests
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS feature_requests (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                author_id TEXT,
                category_id TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                star_count INTEGER DEFAULT 0,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Search analytics (append-only)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS search_analytics (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                original_query TEXT NOT NULL,
                expanded_query TEXT,
                user_id TEXT,
                results_count INTEGER,
                response_time_ms INTEGER,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Synonym table; synonyms is a JSON array of strings
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS search_synonyms (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                term TEXT UNIQUE NOT NULL,
                synonyms TEXT NOT NULL DEFAULT '[]',
                weight REAL DEFAULT 1.0
            )
        """)

        # Create indexes
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_articles_status ON content_articles(status)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_articles_category ON content_articles(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_questions_category ON questions(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_forum_category ON forum_posts(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_features_category ON feature_requests(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_analytics_query ON search_analytics(original_query)")

        conn.commit()
        logger.info("Database schema initialized successfully")

    def insert(self, table: str, rows: Iterable[Dict]) -> int:
        """
        Insert rows into a table.

        Used for seeding; ``table`` and the row keys must be trusted.
        """
        conn = self.connect()
        count = 0
        for row in rows:
            row = dict(row)
            if table == "search_synonyms" and not isinstance(row.get("synonyms"), str):
                row["synonyms"] = json.dumps(row.get("synonyms") or [])
            columns = ", ".join(row)
            placeholders = ", ".join("?" for _ in row)
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                list(row.values())
            )
            count += 1
        conn.commit()
        logger.info(f"Inserted {count} rows into {table}")
        return count

    def close(self):
        """Close database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def init_database(db_path: str) -> Database:
    """
    Initialize database with schema.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Database instance
    """
    db = Database(db_path)
    db.initialize_schema()
    return db

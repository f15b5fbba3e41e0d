"""CLI entry point for creating the database tables."""
import sys

from community_stream.config import Settings
from community_stream.db.sessions import create_db_engine, init_db


def init() -> None:
    """Create all tables in DATABASE_URL (or the URL given as first argument)."""
    settings = Settings.from_env()
    url = sys.argv[1] if len(sys.argv) > 1 else settings.database_url
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        sys.exit(1)
    engine = create_db_engine(url, echo=settings.sql_echo)
    init_db(engine)
    print(f"Tables created in {engine.url.render_as_string(hide_password=True)}")

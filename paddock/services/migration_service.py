import logging
import subprocess
import sys
from pathlib import Path

from sqlalchemy.engine import make_url

from paddock.core.config import settings

logger = logging.getLogger(__name__)

# alembic.ini lives at the project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return
    if not url.database or url.database == ":memory:":
        return

    db_dir = Path(url.database).parent
    if not db_dir.exists():
        logger.info(f"Creating database directory: {db_dir}")
        db_dir.mkdir(parents=True, exist_ok=True)


def _alembic_command() -> list[str]:
    try:
        subprocess.run(
            ["alembic", "--version"],
            check=True,
            capture_output=True,
            text=True,
        )
        return ["alembic"]
    except (subprocess.CalledProcessError, FileNotFoundError):
        return [sys.executable, "-m", "alembic"]


async def run_migrations():
    """Upgrade the database to the latest Alembic revision."""
    try:
        logger.info("Running database migrations...")
        _ensure_sqlite_directory(settings.DATABASE_URL)

        result = subprocess.run(
            _alembic_command() + ["upgrade", "head"],
            check=True,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
        )
        logger.info("Migrations completed successfully")
        if result.stdout:
            logger.info(f"Alembic output: {result.stdout}")

    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed with exit code {e.returncode}")
        if e.stdout:
            logger.error(f"Stdout: {e.stdout}")
        if e.stderr:
            logger.error(f"Stderr: {e.stderr}")
        raise RuntimeError("Database migration failed") from e
    except Exception as e:
        logger.error(f"Unexpected error during migration: {e}")
        raise RuntimeError("Database migration failed") from e

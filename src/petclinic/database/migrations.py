"""
Programmatic access to the clinic's Alembic migrations.

    manager = MigrationManager(database_url="postgresql://clinic@db/petclinic")
    manager.upgrade_database()
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.ext.asyncio import AsyncEngine

from ..exceptions import MigrationException

logger = logging.getLogger(__name__)

# Working directory first, then the project root next to src/
ALEMBIC_INI_CANDIDATES = (
    "alembic.ini",
    os.path.join("..", "alembic.ini"),
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "alembic.ini"),
)


def _locate_alembic_ini() -> str:
    for candidate in ALEMBIC_INI_CANDIDATES:
        if os.path.exists(candidate):
            return os.path.abspath(candidate)
    raise MigrationException("Could not find alembic.ini configuration file")


class MigrationManager:
    """
    Runs Alembic commands against the clinic schema.

    Args:
        alembic_config_path: Path to ``alembic.ini``; searched for when omitted
        database_url: Replaces ``sqlalchemy.url`` from the ini file
    """

    def __init__(
        self,
        alembic_config_path: Optional[str] = None,
        database_url: Optional[str] = None,
    ):
        self.alembic_config_path = alembic_config_path or _locate_alembic_ini()
        self.database_url = database_url
        self._alembic_config: Optional[Config] = None

    @property
    def alembic_config(self) -> Config:
        if self._alembic_config is None:
            config = Config(self.alembic_config_path)
            if self.database_url:
                config.set_main_option("sqlalchemy.url", self.database_url)
            self._alembic_config = config
        return self._alembic_config

    def _run(self, action: str, func: Callable[[], Any], revision: Optional[str] = None) -> Any:
        try:
            return func()
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise MigrationException(
                f"Failed to {action}: {e}", migration_version=revision, original_error=e
            )

    def upgrade_database(self, revision: str = "head", sql: bool = False) -> None:
        """
        Upgrade to ``revision``; with ``sql=True`` only print the SQL.

        Raises:
            MigrationException: If Alembic fails
        """
        logger.info(f"Upgrading database to {revision}")
        self._run(
            "upgrade database",
            lambda: command.upgrade(self.alembic_config, revision, sql=sql),
            revision,
        )

    def downgrade_database(self, revision: str, sql: bool = False) -> None:
        """Downgrade to ``revision`` (``"-1"``, ``"base"``, a revision id)."""
        logger.warning(f"Downgrading database to {revision}")
        self._run(
            "downgrade database",
            lambda: command.downgrade(self.alembic_config, revision, sql=sql),
            revision,
        )

    def _scripts(self) -> ScriptDirectory:
        return ScriptDirectory.from_config(self.alembic_config)

    def get_head_revision(self) -> Optional[str]:
        return self._run(
            "read migration scripts", lambda: self._scripts().get_current_head()
        )

    def get_migration_history(self) -> List[Dict[str, Any]]:
        """Revisions newest first, as ``revision``/``down_revision``/``doc`` dicts."""
        return self._run(
            "get migration history",
            lambda: [
                {"revision": r.revision, "down_revision": r.down_revision, "doc": r.doc}
                for r in self._scripts().walk_revisions()
            ],
        )

    async def get_current_revision(self, engine: AsyncEngine) -> Optional[str]:
        """
        Revision stamped in the database, or None before the first migration.

        Raises:
            MigrationException: If the database cannot be read
        """
        try:
            async with engine.connect() as conn:
                return await conn.run_sync(
                    lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
                )
        except Exception as e:
            logger.error(f"Failed to get current revision: {e}")
            raise MigrationException(f"Failed to get current revision: {e}", original_error=e)

    async def is_up_to_date(self, engine: AsyncEngine) -> bool:
        return await self.get_current_revision(engine) == self.get_head_revision()

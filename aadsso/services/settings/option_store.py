"""
Persistence helpers for named options.

The resolver only needs to read the settings mapping and read/write the
one-time migration flag; writing the settings mapping belongs to the admin UI.
"""

import copy
from typing import Any, Callable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aadsso.models.site_option import SiteOption

SETTINGS_OPTION = "aad-settings"


class OptionStore(Protocol):
    async def get_option(self, name: str, default: Any = None) -> Any:
        ...

    async def update_option(self, name: str, value: Any) -> None:
        ...


class InMemoryOptionStore:
    """Dictionary-backed store for tests and single-process embedding."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._options: dict[str, Any] = dict(initial or {})

    async def get_option(self, name: str, default: Any = None) -> Any:
        if name not in self._options:
            return default
        return copy.deepcopy(self._options[name])

    async def update_option(self, name: str, value: Any) -> None:
        self._options[name] = copy.deepcopy(value)


class SqlAlchemyOptionStore:
    """Options kept in the ``site_options`` table, one session per call."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def get_option(self, name: str, default: Any = None) -> Any:
        async with self._session_factory() as db:
            result = await db.execute(select(SiteOption).where(SiteOption.name == name))
            row = result.scalar_one_or_none()

        if row is None or row.value is None:
            return default
        return row.value

    async def update_option(self, name: str, value: Any) -> None:
        async with self._session_factory() as db:
            result = await db.execute(select(SiteOption).where(SiteOption.name == name))
            row = result.scalar_one_or_none()

            if row is None:
                db.add(SiteOption(name=name, value=value))
            else:
                row.value = value

            await db.commit()

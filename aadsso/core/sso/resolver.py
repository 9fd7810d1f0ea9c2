"""
Settings resolver.

One resolver is built at application startup and handed to request handlers
through FastAPI dependencies. The first ``resolve()`` call merges the stored
options over the defaults, runs the one-time migration and then overlays the
discovery document; the finished record is cached until ``reload()``.
"""

from enum import Enum
from typing import Any, Mapping, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from aadsso.core.logging_config import get_logger
from aadsso.core.sso.config import AADSSOSettings, get_aad_sso_settings
from aadsso.core.sso.directory import DirectoryClient, DirectoryGroupCache
from aadsso.core.sso.discovery import (
    DiscoveryFetcher,
    DocumentFetchError,
    DocumentParseError,
)
from aadsso.core.sso.merger import merge_settings
from aadsso.core.sso.migrations import GROUP_MAP_FLAG_OPTION, apply_group_map_default_on
from aadsso.core.sso.records import DOCUMENT_OVERRIDABLE_FIELDS, DirectoryGroup, SettingsRecord
from aadsso.services.settings.option_store import (
    SETTINGS_OPTION,
    OptionStore,
    SqlAlchemyOptionStore,
)

logger = get_logger("aadsso.sso.resolver")


class DocumentFetcher(Protocol):
    async def fetch(self, uri: str) -> dict[str, Any]:
        ...


class ResolverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


# Per-field validators for document overlays
_FIELD_ADAPTERS: dict[str, TypeAdapter] = {
    name: TypeAdapter(field.annotation)
    for name, field in SettingsRecord.model_fields.items()
    if name in DOCUMENT_OVERRIDABLE_FIELDS
}


def apply_document(record: SettingsRecord, document: Mapping[str, Any]) -> SettingsRecord:
    """
    Overwrite record fields with same-named keys from a settings document.

    Keys are applied one at a time: unknown keys are ignored, and a key whose
    value fails validation is skipped (logged at warning) without discarding
    the rest of the document.
    """
    overrides = {}
    for key, value in document.items():
        adapter = _FIELD_ADAPTERS.get(key)
        if adapter is None:
            continue
        try:
            overrides[key] = adapter.validate_python(value)
        except ValidationError as e:
            logger.warning(f"Ignoring settings document key {key!r}: {e.errors()[0]['msg']}")

    if not overrides:
        return record
    return record.model_copy(update=overrides)


class SettingsResolver:
    """Builds the SettingsRecord once and serves it for the process lifetime."""

    def __init__(
        self,
        defaults: SettingsRecord,
        store: OptionStore,
        fetcher: DocumentFetcher,
        directory_client: Optional[DirectoryClient] = None,
        settings_option: str = SETTINGS_OPTION,
        migration_flag_option: str = GROUP_MAP_FLAG_OPTION,
    ):
        self.defaults = defaults
        self.store = store
        self.fetcher = fetcher
        self.settings_option = settings_option
        self.migration_flag_option = migration_flag_option
        self.groups = DirectoryGroupCache(directory_client)
        self._record: Optional[SettingsRecord] = None
        self._resolving = 0

    @property
    def state(self) -> ResolverState:
        if self._record is not None:
            return ResolverState.RESOLVED
        if self._resolving:
            return ResolverState.RESOLVING
        return ResolverState.UNINITIALIZED

    @property
    def record(self) -> Optional[SettingsRecord]:
        return self._record

    async def resolve(self) -> SettingsRecord:
        """Return the resolved settings, computing them on first use."""
        record = self._record
        if record is not None:
            return record

        self._resolving += 1
        try:
            record = await self._build_record()
        finally:
            self._resolving -= 1

        # Concurrent first calls may each get here; publish whole records only.
        self._record = record
        return record

    async def reload(self) -> SettingsRecord:
        """Discard the cached record and directory groups and resolve again."""
        self._record = None
        self.groups.reset()
        return await self.resolve()

    async def get_groups(self) -> Optional[list[DirectoryGroup]]:
        """Directory groups for the configured tenant (None without a tenant)."""
        record = await self.resolve()
        return await self.groups.get_groups(record.tenant_domain)

    async def _build_record(self) -> SettingsRecord:
        persisted = await self.store.get_option(self.settings_option, {})
        record = merge_settings(self.defaults, persisted)
        record = await apply_group_map_default_on(self.store, record, self.migration_flag_option)

        logger.set_context(tenant_domain=record.tenant_domain or None)
        uri = record.openid_configuration_endpoint
        try:
            document = await self.fetcher.fetch(uri)
            record = apply_document(record, document)
        except (DocumentFetchError, DocumentParseError) as e:
            logger.warning(f"Discovery document not applied, keeping stored endpoints: {e}")
        else:
            logger.info(f"Settings resolved with discovery document from {uri}")

        return record


def build_settings_resolver(
    sso_settings: Optional[AADSSOSettings] = None,
    store: Optional[OptionStore] = None,
    directory_client: Optional[DirectoryClient] = None,
) -> SettingsResolver:
    """
    Wire a resolver from environment defaults and the database option store.
    """
    sso_settings = sso_settings or get_aad_sso_settings()
    if store is None:
        # Imported here so the engine is only created when the database is used
        from aadsso.db.session import AsyncSessionLocal

        store = SqlAlchemyOptionStore(AsyncSessionLocal)

    return SettingsResolver(
        defaults=sso_settings.to_record(),
        store=store,
        fetcher=DiscoveryFetcher(timeout=sso_settings.DISCOVERY_TIMEOUT),
        directory_client=directory_client,
        settings_option=sso_settings.SETTINGS_OPTION_NAME,
        migration_flag_option=sso_settings.MIGRATION_FLAG_OPTION,
    )

# Settings Services Package
# Option storage backing the SSO settings

from aadsso.services.settings.option_store import (
    InMemoryOptionStore,
    OptionStore,
    SETTINGS_OPTION,
    SqlAlchemyOptionStore,
)

__all__ = [
    "InMemoryOptionStore",
    "OptionStore",
    "SETTINGS_OPTION",
    "SqlAlchemyOptionStore",
]

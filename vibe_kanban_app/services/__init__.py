# Services package for the Vibe Kanban client
#
# Use explicit imports:
#   from vibe_kanban_app.services.config_service import HttpConfigService, InMemoryConfigService
#   from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol

__all__ = [
    "ConfigPersistenceProtocol",
    "HttpConfigService",
    "InMemoryConfigService",
]


def __getattr__(name: str):
    """Lazy import so ``services`` can be imported without pulling in httpx."""
    if name == "ConfigPersistenceProtocol":
        from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol

        return ConfigPersistenceProtocol
    if name == "HttpConfigService":
        from vibe_kanban_app.services.config_service import HttpConfigService

        return HttpConfigService
    if name == "InMemoryConfigService":
        from vibe_kanban_app.services.config_service import InMemoryConfigService

        return InMemoryConfigService
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

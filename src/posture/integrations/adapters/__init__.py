"""Findings source registry: maps backend name to lazy-import class path."""

AVAILABLE_SOURCES: dict[str, str] = {
    "database": "posture.integrations.adapters.database.DatabaseFindingsSource",
    "remote": "posture.integrations.adapters.remote.RemoteFindingsSource",
}


def import_source(dotted_path: str):
    """Import a findings source class from its dotted module path."""
    import importlib

    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)

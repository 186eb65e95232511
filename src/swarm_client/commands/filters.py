"""Parsing of repeatable key=value CLI options."""

from swarm_client.app_context import AppContext


def _split(app: AppContext, item: str) -> tuple[str, str]:
    key, sep, value = item.partition("=")
    if not sep or not key:
        app.out.print_error_and_exit("invalid_option", f"Expected key=value, got '{item}'.")
    return key, value


def parse_filters(app: AppContext, items: list[str] | None) -> dict[str, list[str]] | None:
    """Group ``key=value`` items into the engine's filter map ``{key: [values]}``."""
    if not items:
        return None
    filters: dict[str, list[str]] = {}
    for item in items:
        key, value = _split(app, item)
        filters.setdefault(key, []).append(value)
    return filters


def parse_labels(app: AppContext, items: list[str] | None) -> dict[str, str] | None:
    """Turn ``key=value`` items into a label map."""
    if not items:
        return None
    return dict(_split(app, item) for item in items)

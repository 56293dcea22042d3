from collections.abc import Iterable, Mapping
from typing import Any


def _contains(value: Any, term: str) -> bool:
    return term in str(value or "").lower()


def filter_items(items: Iterable[Mapping[str, Any]], search_text: str) -> list[Mapping[str, Any]]:
    """Case-insensitive match on item name or description; a blank search keeps everything."""
    term = search_text.strip().lower()
    if not term:
        return list(items)
    return [item for item in items if _contains(item["name"], term) or _contains(item["description"], term)]


def filter_clients(clients: Iterable[Mapping[str, Any]], search_text: str) -> list[Mapping[str, Any]]:
    term = search_text.strip().lower()
    if not term:
        return list(clients)
    return [client for client in clients if _contains(client["name"], term) or _contains(client["email"], term)]

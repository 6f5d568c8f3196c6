"""Case-insensitive free-text filtering over serialised records."""

from typing import Any, Iterable, List, Optional, Sequence


def resolve_path(record: Any, path: str) -> Any:
    """
    Walk a dotted path (e.g. ``client.full_name``) through nested dicts or
    objects. Returns None as soon as a segment is missing.
    """
    value = record
    for key in path.split('.'):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(key)
        else:
            value = getattr(value, key, None)
    return value


def matches(record: Any, query: str, fields: Sequence[str]) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    for field in fields:
        value = resolve_path(record, field)
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def filter_records(records: Iterable[Any], query: Optional[str], fields: Sequence[str]) -> List[Any]:
    """
    Keep the records where any of ``fields`` contains ``query``.

    An empty or missing query returns every record unchanged.
    """
    records = list(records)
    if not query or not query.strip():
        return records
    return [record for record in records if matches(record, query, fields)]

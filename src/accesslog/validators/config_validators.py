import json


def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()


def to_path_set(value) -> frozenset[str]:
    """
    Normalize a skip-path value into a frozenset of exact path strings.

    Accepts None, an iterable of strings, a JSON list ('["/health", "/metrics"]')
    or a comma-separated string ("/health,/metrics"). Empty entries are dropped;
    entries are otherwise kept verbatim because skip matching is exact.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            value = json.loads(text)
        else:
            value = text.split(",")
    return frozenset(p.strip() for p in value if p and p.strip())

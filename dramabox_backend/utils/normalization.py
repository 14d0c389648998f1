from __future__ import annotations

ShowKey = tuple[str, str]


def normalize_title(title: str | None) -> str:
    return (title or "").strip().casefold()


def normalize_year(year: str | int | None) -> str:
    if year is None:
        return ""
    return str(year).strip()


def show_key(title: str | None, year: str | int | None) -> ShowKey:
    """
    Composite identity of a show: case-folded, trimmed title plus trimmed year.

    Every catalog source (local cache, remote rows, scraped pages) must key shows
    through this function so that "Go With The Float" and " go with the float "
    collapse to the same record.
    """

    return normalize_title(title), normalize_year(year)


def show_key_string(title: str | None, year: str | int | None) -> str:
    normalized_title, normalized_year = show_key(title, year)
    return f"{normalized_title}-{normalized_year}"

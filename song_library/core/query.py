from typing import Any, List, Tuple

SONG_COLUMNS = "song_id, group_name, song_name, release_date, lyrics, link"


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SongQuery:
    """
    Builds a parameterized SELECT over the songs table.

    Predicates are templates with a single "{}" slot that is filled with the
    next $n placeholder at render time. Values are only ever bound, never
    formatted into the SQL text.
    """

    def __init__(self, table: str = "songs", columns: str = SONG_COLUMNS):
        self.table = table
        self.columns = columns
        self._filters: List[Tuple[str, Any]] = []
        self._order_by = "song_id"
        self._limit = None
        self._offset = None

    def where(self, predicate: str, value: Any) -> "SongQuery":
        self._filters.append((predicate, value))
        return self

    def ilike(self, column: str, text: str) -> "SongQuery":
        """Case-insensitive substring match. % and _ in text match literally."""
        return self.where(f"{column} ILIKE {{}} ESCAPE '\\'", f"%{escape_like(text)}%")

    def equals(self, column: str, value: Any) -> "SongQuery":
        return self.where(f"{column} = {{}}", value)

    def paginate(self, page: int, limit: int) -> "SongQuery":
        self._limit = limit
        self._offset = (page - 1) * limit
        return self

    def render(self) -> Tuple[str, List[Any]]:
        args: List[Any] = []

        def placeholder(value: Any) -> str:
            args.append(value)
            return f"${len(args)}"

        query = f"SELECT {self.columns} FROM {self.table}"
        if self._filters:
            clauses = [predicate.format(placeholder(value)) for predicate, value in self._filters]
            query += " WHERE " + " AND ".join(clauses)

        query += f" ORDER BY {self._order_by}"
        if self._limit is not None:
            query += f" LIMIT {placeholder(self._limit)} OFFSET {placeholder(self._offset)}"
        return query, args

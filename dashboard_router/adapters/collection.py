"""In-memory adapter over a list of records."""

from typing import Any, Callable, Dict, List, Optional

from ..cache import now_ms
from ..models import AggregateableData, AppContextData
from .base import AggregatingAdapter, SearchableAdapter
from .keyword import KeywordAdapter

DEFAULT_SEARCH_FIELDS = [
    {"path": "title", "label": "Title"},
    {"path": "description", "label": "Description"},
]


class CollectionAdapter(KeywordAdapter, SearchableAdapter, AggregatingAdapter):
    """
    Adapter for a mini-app whose state is a flat collection of items.

    Each record is a dict. A truthy "favorite" key marks the record as a
    favorite; other keys are free-form and searched through search_fields.
    """

    def __init__(
        self,
        app_name: str,
        display_name: str,
        keywords: List[str],
        item_type: str,
        records: Optional[List[Dict[str, Any]]] = None,
        icon: Optional[str] = None,
        is_active: bool = True,
        search_fields: Optional[List[Dict[str, str]]] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the adapter.

        Args:
            app_name: Registry key
            display_name: Human-readable name
            keywords: Keywords used for routing
            item_type: AggregateableData type of the records (e.g. "image")
            records: Initial records
            icon: Optional icon identifier
            is_active: Whether the app reports itself as active
            search_fields: Field entries searched by search() (defaults to title/description)
            clock: Callable returning epoch milliseconds
        """
        super().__init__()
        self.app_name = app_name
        self.display_name = display_name
        self.icon = icon
        self.item_type = item_type
        self.is_active = is_active
        self.search_fields = search_fields or DEFAULT_SEARCH_FIELDS
        self._keywords = [k.lower() for k in keywords]
        self._records: List[Dict[str, Any]] = list(records or [])
        self._clock = clock or now_ms
        self._last_used = self._clock() if self._records else 0

    @classmethod
    def from_dict(cls, entry: Dict[str, Any], clock: Optional[Callable[[], int]] = None) -> "CollectionAdapter":
        """
        Build an adapter from a JSON-style description.

        Args:
            entry: Dict with app_name, display_name, keywords, item_type and
                optional records, icon, is_active

        Returns:
            CollectionAdapter instance

        Raises:
            ValueError: If a required key is missing
        """
        missing = [key for key in ("app_name", "display_name", "item_type") if not entry.get(key)]
        if missing:
            raise ValueError(f"Collection description missing: {', '.join(missing)}")
        return cls(
            app_name=entry["app_name"],
            display_name=entry["display_name"],
            keywords=entry.get("keywords", []),
            item_type=entry["item_type"],
            records=entry.get("records", []),
            icon=entry.get("icon"),
            is_active=entry.get("is_active", True),
            clock=clock,
        )

    @property
    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def favorites(self) -> List[Dict[str, Any]]:
        return [record for record in self._records if record.get("favorite")]

    def add_record(self, record: Dict[str, Any]) -> None:
        """Append a record and notify subscribers."""
        self._records.append(record)
        self._last_used = self._clock()
        self.notify_subscribers(self.records)

    def remove_record(self, index: int) -> Dict[str, Any]:
        """Remove the record at index and notify subscribers."""
        record = self._records.pop(index)
        self._last_used = self._clock()
        self.notify_subscribers(self.records)
        return record

    def set_active(self, is_active: bool) -> None:
        self.is_active = is_active
        self.notify_subscribers(self.records)

    def get_keywords(self) -> List[str]:
        return list(self._keywords)

    def get_context_data(self) -> AppContextData:
        count = len(self._records)
        favorite_count = len(self.favorites())
        if count:
            summary = f"{count} {self.item_type}s saved"
            if favorite_count:
                summary += f", {favorite_count} marked as favorite"
        else:
            summary = ""

        return AppContextData(
            app_name=self.app_name,
            display_name=self.display_name,
            is_active=self.is_active,
            last_used=self._last_used,
            data={"count": count, "favorites": favorite_count},
            summary=summary,
            capabilities=self.get_capabilities(),
            icon=self.icon,
        )

    async def get_response(self, query: str) -> Optional[str]:
        context = self.get_context_data()
        if not context.is_active:
            return self.get_inactive_response()
        if not self._records:
            return f"You don't have any {self.item_type}s in {self.display_name} yet."

        if "favorite" in query.lower():
            titles = [str(r.get("title", "untitled")) for r in self.favorites()]
            if not titles:
                return f"None of your {self.item_type}s in {self.display_name} are marked as favorite."
            return f"Your favorite {self.item_type}s in {self.display_name}: {', '.join(titles)}."

        return f"{self.display_name}: {context.summary}."

    async def search(self, query: str) -> List[Dict[str, str]]:
        results = []
        for record in self._records:
            results.extend(self.search_in_fields(record, query, self.search_fields))
        return results

    def supports_aggregation(self) -> bool:
        return bool(self._records)

    def get_aggregate_data(self) -> List[AggregateableData]:
        return [
            AggregateableData(
                type=self.item_type,
                count=len(self._records),
                label=f"{self.item_type}s",
                app_name=self.app_name,
                metadata={"favorites": len(self.favorites())},
            )
        ]

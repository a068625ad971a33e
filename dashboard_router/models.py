"""Data models shared by the preprocessor, scorer and registry."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AppContextData:
    """Snapshot of one mini-app's state, produced by its adapter."""
    app_name: str
    display_name: str
    is_active: bool = False
    last_used: int = 0  # epoch milliseconds
    data: Any = None
    summary: str = ""
    capabilities: List[str] = field(default_factory=list)
    icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "app_name": self.app_name,
            "display_name": self.display_name,
            "is_active": self.is_active,
            "last_used": self.last_used,
            "data": self.data,
            "summary": self.summary,
            "capabilities": list(self.capabilities),
            "icon": self.icon,
        }


@dataclass
class AggregateableData:
    """A typed counter an adapter contributes to cross-app answers."""
    type: str  # "image", "document", ...
    count: int
    label: str
    app_name: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SpellCorrection:
    """A single table-driven token correction."""
    original: str
    corrected: str
    distance: int


@dataclass
class PreprocessResult:
    """Output of the text preprocessing pipeline."""
    original: str
    normalized: str
    corrections: List[SpellCorrection] = field(default_factory=list)
    expansions: List[str] = field(default_factory=list)


@dataclass
class ScoreBreakdown:
    """Per-signal scores (or weights) used by the hybrid scorer."""
    semantic: float = 0.0
    keyword: float = 0.0
    context: float = 0.0


@dataclass
class ScoreMetadata:
    """Context recorded alongside a confidence score."""
    is_active: bool = False
    last_used: int = 0
    cache_hit: bool = False


@dataclass
class ConfidenceResult:
    """Relevance of one adapter for one query."""
    adapter: Any  # AppAdapter
    total_score: float
    breakdown: ScoreBreakdown
    weights: ScoreBreakdown
    metadata: ScoreMetadata = field(default_factory=ScoreMetadata)


@dataclass
class ExplanationFactor:
    """One signal's contribution to a confidence score."""
    type: str  # "semantic" | "keyword" | "context"
    score: float
    weight: float
    contribution: float
    details: str


@dataclass
class ConfidenceExplanation:
    """Human-readable account of how a score was produced."""
    query: str
    adapter: str
    total_score: float
    explanation: str
    factors: List[ExplanationFactor] = field(default_factory=list)

    def to_text(self) -> str:
        """Render the explanation as a short multi-line report."""
        lines = [
            f"Confidence for '{self.adapter}' on \"{self.query}\": {self.total_score:.2f}",
            self.explanation,
        ]
        for factor in self.factors:
            lines.append(
                f"- {factor.type}: {factor.score:.2f} x {factor.weight:.2f} = "
                f"{factor.contribution:.2f} ({factor.details})"
            )
        return "\n".join(lines)


@dataclass
class RankedAdapter:
    """An adapter that cleared the routing floor for a query."""
    adapter: Any  # AppAdapter
    confidence: float
    result: Optional[ConfidenceResult] = None


@dataclass
class SearchResult:
    """Search hits contributed by one adapter."""
    app_name: str
    results: List[Any]


@dataclass
class DashboardSnapshot:
    """Full registry state handed to subscribers."""
    apps: Dict[str, AppContextData]
    active_apps: List[str]
    last_updated: int


@dataclass
class AggregateResult:
    """Answer to a cross-app query, summed by data type."""
    query: str
    concept: Optional[str]
    totals: Dict[str, int]
    total: int
    entries: List[AggregateableData] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass
class QueryResponse:
    """Natural-language answer chosen for a query."""
    app_name: str
    response: str
    confidence: float = 0.0

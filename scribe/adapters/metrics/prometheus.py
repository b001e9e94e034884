"""Prometheus metrics adapter.

Implements AuthorMetrics with prometheus_client counters kept in a
dedicated registry, so several instances (one per test, say) never
collide in the global default registry.
"""

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

from scribe.core.ports import AuthorMetrics


class PrometheusAuthorMetrics(AuthorMetrics):
    """Counts author creations by outcome."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize counters.

        Args:
            registry: Registry to register metrics in. A new one is
                created when omitted.
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.author_creations = Counter(
            "scribe_author_creations_total",
            "Total number of author creation attempts, by outcome.",
            ["outcome"],
            registry=self.registry,
        )

    async def record_creation_success(self) -> None:
        self.author_creations.labels(outcome="success").inc()

    async def record_creation_failure(self) -> None:
        self.author_creations.labels(outcome="failure").inc()

    def count(self, outcome: str) -> float:
        """Current value of the counter for outcome."""
        value = self.registry.get_sample_value(
            "scribe_author_creations_total", {"outcome": outcome}
        )
        return value or 0.0

    def render(self) -> bytes:
        """Render all metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)

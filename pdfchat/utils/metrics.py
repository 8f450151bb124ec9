"""Prometheus metrics for ingestion and chat."""

from prometheus_client import Counter, Histogram

ingest_files_total = Counter(
    "ingest_files_total",
    "Uploaded files by ingestion outcome",
    ["outcome"],
)

chunks_created_total = Counter(
    "chunks_created_total",
    "Total document chunks persisted",
)

chat_completions_total = Counter(
    "chat_completions_total",
    "Completion service calls by outcome",
    ["outcome"],
)

completion_latency_ms = Histogram(
    "completion_latency_ms",
    "Completion service latency in milliseconds",
    ["outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000],
)


class PrometheusChatMetrics:
    """Prometheus-based metrics for the upload and chat paths."""

    def record_file(self, outcome: str, chunk_count: int = 0) -> None:
        """Count one processed upload and the chunks it produced."""
        ingest_files_total.labels(outcome=outcome).inc()
        if chunk_count:
            chunks_created_total.inc(chunk_count)

    def record_completion(self, outcome: str, latency_ms: float) -> None:
        """Count one completion call and observe its latency."""
        chat_completions_total.labels(outcome=outcome).inc()
        completion_latency_ms.labels(outcome=outcome).observe(latency_ms)

# chatrelay/metrics.py
"""
Prometheus metrics for the chat relay.

Metrics are organized by component:
- Streams: lifecycle and outcome of each relayed response
- Upstream: LLM provider failures
- Search: web search / answer engine calls and quota rejections
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# STREAM METRICS
# ============================================================================

chatrelay_streams_total = Counter(
    "chatrelay_streams_total",
    "Relayed response streams by final outcome",
    ["provider", "outcome"],  # outcome: "completed", "error", "disconnected", "answer_engine"
)

chatrelay_chunks_total = Counter(
    "chatrelay_chunks_total",
    "Classified chunks forwarded to clients",
    ["kind"],  # "content", "reasoning"
)

chatrelay_first_chunk_seconds = Histogram(
    "chatrelay_first_chunk_seconds",
    "Time from upstream request to the first classified chunk",
    ["provider"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

chatrelay_stream_duration_seconds = Histogram(
    "chatrelay_stream_duration_seconds",
    "Total duration of a relayed stream",
    ["provider"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300),
)

# ============================================================================
# UPSTREAM METRICS
# ============================================================================

chatrelay_upstream_errors_total = Counter(
    "chatrelay_upstream_errors_total",
    "Failed upstream generation requests (transport or non-2xx)",
    ["provider"],
)

# ============================================================================
# SEARCH METRICS
# ============================================================================

chatrelay_search_requests_total = Counter(
    "chatrelay_search_requests_total",
    "Search augmentation calls",
    ["engine", "outcome"],  # engine: "tavily", "perplexity"; outcome: "ok", "empty", "error"
)

chatrelay_quota_rejections_total = Counter(
    "chatrelay_quota_rejections_total",
    "Requests rejected because the monthly search quota was exhausted",
)

__all__ = [
    "chatrelay_streams_total",
    "chatrelay_chunks_total",
    "chatrelay_first_chunk_seconds",
    "chatrelay_stream_duration_seconds",
    "chatrelay_upstream_errors_total",
    "chatrelay_search_requests_total",
    "chatrelay_quota_rejections_total",
]

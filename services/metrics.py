"""Prometheus metrics for the chat relay."""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

chat_turns_total = Counter(
    "chat_turns_total",
    "Total number of chat turns processed",
    ["status"],
)

rate_limit_decisions_total = Counter(
    "rate_limit_decisions_total",
    "Quota gate decisions",
    ["decision"],
)

agent_call_duration_seconds = Histogram(
    "agent_call_duration_seconds",
    "Latency of conversational agent calls",
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60),
)

agent_tool_calls_total = Counter(
    "agent_tool_calls_total",
    "Repository tool invocations made on behalf of the agent",
    ["tool", "status"],
)


def render_metrics() -> bytes:
    """Render the default registry in Prometheus text format."""
    return generate_latest()


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST

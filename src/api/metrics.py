from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "mailcraft_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "mailcraft_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

LLM_CALLS_TOTAL = get_or_create_metric(
    "mailcraft_llm_calls_total",
    "Upstream chat-completion calls",
    Counter,
    labelnames=["purpose", "status"],
)

LLM_LATENCY_SECONDS = get_or_create_metric(
    "mailcraft_llm_latency_seconds",
    "Upstream chat-completion latency",
    Histogram,
    labelnames=["purpose"],
)

TOOL_CALLS_TOTAL = get_or_create_metric(
    "mailcraft_tool_calls_total", "Tool calls requested by the model", Counter, labelnames=["tool"]
)

CREDITS_CONSUMED_TOTAL = get_or_create_metric(
    "mailcraft_credits_consumed_total", "Credits consumed before LLM calls", Counter
)

CREDITS_RESTORED_TOTAL = get_or_create_metric(
    "mailcraft_credits_restored_total", "Credits restored after failed LLM calls", Counter
)

ORPHANED_SUBTASKS_TOTAL = get_or_create_metric(
    "mailcraft_orphaned_subtasks_total",
    "Generated subtasks whose main task name matched no main task",
    Counter,
)

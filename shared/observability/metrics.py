from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from fastapi import Response


tutor_requests = Counter(
    "tutor_requests_total",
    "Total tutor API requests by route and outcome",
    ["route", "outcome"],
)

llm_generation_time = Histogram(
    "llm_generation_time_seconds",
    "Wall-clock time of a generation, retries included",
    ["provider"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

llm_retries = Counter(
    "llm_retries_total",
    "Retry attempts issued after a transient provider failure",
    ["operation"],
)

llm_tokens = Counter(
    "llm_tokens_total",
    "Total LLM tokens consumed",
    ["provider", "direction"],
)


def metrics_response() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )

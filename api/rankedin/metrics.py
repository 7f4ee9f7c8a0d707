from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response

# Contribution pipeline outcomes
contributions = Counter(
    "rankedin_contributions_total",
    "Contribution attempts by entity kind and outcome",
    ["kind", "outcome"],  # outcome: created | degraded | an error code | error (unexpected)
)

badges_rendered = Counter(
    "rankedin_badges_rendered_total",
    "Badges served",
    ["style", "format"],
)

# GitHub API calls (from services.github)
github_requests = Counter(
    "rankedin_github_requests_total",
    "Requests made to the GitHub REST API",
    ["endpoint", "status"],
)

github_request_duration = Histogram(
    "rankedin_github_request_duration_seconds",
    "GitHub REST API latency",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# HTTP request metrics (from middleware)
http_requests = Counter(
    "rankedin_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)

http_request_duration = Histogram(
    "rankedin_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "path"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


async def metrics_endpoint():
    """FastAPI endpoint handler that returns Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

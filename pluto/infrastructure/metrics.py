from prometheus_client import Counter, Histogram, generate_latest
from fastapi import Response

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

db_queries_total = Counter('db_queries_total', 'Total database queries')

check_ins_total = Counter(
    'check_ins_total',
    'Daily check-in submissions',
    ['outcome']  # created | existing
)
progress_toggles_total = Counter(
    'progress_toggles_total',
    'Video completion toggles',
    ['completed']
)

def metrics_endpoint():
    """Prometheus scrape payload"""
    return Response(content=generate_latest(), media_type="text/plain")

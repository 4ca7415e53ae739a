"""
Prometheus metrics for monitoring
"""
import time
from functools import wraps

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# ==================== HTTP Metrics ====================

# endpoint is the route template (/api/v1/bookings/{booking_id}), never the raw path
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

# ==================== Booking Metrics ====================

bookings_created_total = Counter(
    'bookings_created_total',
    'Total bookings created in pending state'
)

bookings_confirmed_total = Counter(
    'bookings_confirmed_total',
    'Total bookings confirmed'
)

bookings_cancelled_total = Counter(
    'bookings_cancelled_total',
    'Total bookings cancelled',
    ['previous_status']
)

bookings_expired_total = Counter(
    'bookings_expired_total',
    'Total pending bookings expired',
    ['trigger']  # confirm, cancel, read, list, worker
)

booking_creation_duration_seconds = Histogram(
    'booking_creation_duration_seconds',
    'Time to create a booking',
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0]
)

# ==================== Seat Metrics ====================

seat_conflicts_total = Counter(
    'seat_conflicts_total',
    'Booking attempts rejected because seats were taken',
    ['stage']  # check: found by occupied-seat scan, constraint: caught by seat_holds
)

seat_counter_drift_total = Counter(
    'seat_counter_drift_total',
    'Reconciliations that found available_seats out of sync'
)

# ==================== Helper Functions ====================

def track_time(metric: Histogram):
    """Decorator to track execution time"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                metric.observe(time.time() - start_time)
        return wrapper
    return decorator


def record_booking_metrics(operation: str, **labels):
    """Record booking transition metrics"""
    if operation == 'create':
        bookings_created_total.inc()
    elif operation == 'confirm':
        bookings_confirmed_total.inc()
    elif operation == 'cancel':
        bookings_cancelled_total.labels(**labels).inc()
    elif operation == 'expire':
        bookings_expired_total.labels(**labels).inc()


def get_metrics():
    """Get current metrics in Prometheus format"""
    return generate_latest(), CONTENT_TYPE_LATEST

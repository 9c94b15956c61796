"""Prometheus collectors shared by the tracker and the cache."""

from prometheus_client import Counter, Gauge, Histogram

VALUE_PRESENT = Gauge("lac_value_present", "Whether the watched node currently holds a value", ["path"])
VALUE_CHANGES = Counter("lac_value_changes_total", "Number of observed changes of the watched node value", ["path"])
ABORTS = Counter("lac_aborts_total", "Number of unrecoverable coordination failures reported to the abort handler", ["path"])
DECODE_ERRORS = Counter("lac_decode_errors_total", "Number of malformed leader address payloads read", ["path"])
WAIT_DURATION = Histogram("lac_wait_duration_seconds", "Duration of blocking waits for the leader address", ["path", "outcome"])

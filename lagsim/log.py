"""Console output stamped with simulated time."""

from lagsim.duration import Duration


def log_with_time(now: Duration, text: str):
    """Print a line prefixed with the current simulated time."""
    print(f"[{now.in_milliseconds():9.3f}ms] {text}")

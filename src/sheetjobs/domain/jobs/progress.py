"""Progress arithmetic for the per-record loop."""


def compute_progress(processed: int, failed: int, total: int) -> int:
    """
    Percentage of records attempted so far.

    progress = floor((processed + failed) / total * 100), clamped to 0-100.
    A job with no records reports 0 here; completion sets 100.

    Examples:
        >>> compute_progress(1, 0, 3)
        33
        >>> compute_progress(2, 1, 3)
        100
    """
    if total <= 0:
        return 0
    attempted = processed + failed
    # integer floor division avoids float rounding (e.g. 29/100*100 = 28.999...)
    return max(0, min(100, (attempted * 100) // total))

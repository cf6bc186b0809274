"""
Progress derivation for translation jobs.
"""


def compute_progress(completed: int, total: int) -> int:
    """
    Percentage of units processed, rounded and clamped to [0, 100].

    A job without units counts as fully complete.

    Args:
        completed: Units processed so far
        total: Units in the job

    Returns:
        Integer percentage
    """
    if total <= 0:
        return 100
    # half up; round() would give 12 for 12.5
    percent = int(completed / total * 100 + 0.5)
    return max(0, min(100, percent))

def format_phase_time(seconds: float | None) -> str:
    """MM:SS countdown for the active phase ("--:--" for open-ended phases)."""
    if seconds is None:
        return "--:--"
    total = max(int(seconds), 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_total_time(seconds: float) -> str:
    """MM:SS, or H:MM:SS once the walk passes an hour."""
    total = max(int(seconds), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"

"""Display helpers for comment views."""


def format_timestamp(seconds: float) -> str:
    """Render a playback position as ``m:ss`` (minutes are not wrapped into hours)."""
    whole = int(max(seconds, 0))
    minutes, remaining = divmod(whole, 60)
    return f"{minutes}:{remaining:02d}"

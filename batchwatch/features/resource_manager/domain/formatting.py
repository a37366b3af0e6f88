def format_duration(milliseconds: int) -> str:
    """45s, 2.5m, 1.5h, 2d 3.0h. Zero means unknown."""
    if not milliseconds:
        return "N/A"

    seconds = milliseconds / 1000
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f}m"

    hours = seconds / 3600
    if hours < 24:
        return f"{hours:.1f}h"

    days = int(hours // 24)
    return f"{days}d {hours - days * 24:.1f}h"


def format_memory(megabytes: int) -> str:
    if not megabytes:
        return "0 MB"
    if megabytes < 1024:
        return f"{megabytes} MB"
    if megabytes < 1024 * 1024:
        return f"{megabytes / 1024:.1f} GB"
    return f"{megabytes / (1024 * 1024):.1f} TB"

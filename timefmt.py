from datetime import datetime


def epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def format_datetime(dt: datetime) -> str:
    """Format as the usage API expects: yyyy-MM-dd HH:mm:ss."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_reset_time(timestamp_ms: int, now: datetime | None = None) -> str:
    """Render a reset time as "20:16" when it falls today, else "01/21 20:16"."""
    reset = datetime.fromtimestamp(timestamp_ms / 1000)
    now = now or datetime.now()
    if reset.date() == now.date():
        return reset.strftime("%H:%M")
    return reset.strftime("%m/%d %H:%M")

from datetime import datetime


def local_now() -> datetime:
    """Current time as an aware datetime in the server's local zone."""
    return datetime.now().astimezone()

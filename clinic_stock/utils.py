from datetime import datetime, date, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def daily_prefix(kind: str, on: date) -> str:
    """Prefix shared by all document numbers issued on one day, e.g. ISS-20250115-."""
    return f"{kind}-{on.strftime('%Y%m%d')}-"


def next_document_number(existing: list[str], prefix: str) -> str:
    """
    Next sequential number in format {prefix}{sequence:04d}.

    Example: ISS-20250115-0001, ISS-20250115-0002, etc.
    """
    max_seq = 0
    for code in existing:
        if code and code.startswith(prefix):
            try:
                max_seq = max(max_seq, int(code[len(prefix):]))
            except ValueError:
                continue
    return f"{prefix}{max_seq + 1:04d}"

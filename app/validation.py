ANONYMOUS = "anon"


def sanitize_username(name) -> str:
    if not isinstance(name, str):
        return ""
    return "".join(ch for ch in name.strip() if ch.isalnum() or ch in ("_", "-"))[:24]


def attempt_user(name) -> str:
    """Name recorded on an attempt; blank or unusable names become 'anon'."""
    return sanitize_username(name) or ANONYMOUS

"""Administrative statement vocabulary used for dual-password rotation."""

START_TRANSACTION = "START TRANSACTION"
FLUSH_PRIVILEGES = "FLUSH PRIVILEGES"
ROLLBACK = "ROLLBACK"
COMMIT = "COMMIT"


def escape_password(password: str) -> str:
    """Escape a password for a single-quoted SQL literal or an inline client flag.

    Backslashes go first so the escapes added for quotes are not doubled.
    """
    escaped = password.replace("\\", "\\\\")
    escaped = escaped.replace("'", "\\'")
    return escaped.replace('"', '\\"')


def alter_user_retain_current(username: str, host: str, password: str) -> str:
    return (
        f"ALTER USER '{username}'@'{host}' IDENTIFIED BY '{escape_password(password)}' "
        "RETAIN CURRENT PASSWORD"
    )


def discard_old_password(username: str, host: str) -> str:
    return f"ALTER USER '{username}'@'{host}' DISCARD OLD PASSWORD"

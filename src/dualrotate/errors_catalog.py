"""Actionable error catalog for dualrotate."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "missing_target": {
        "what": "No target {field} configured.",
        "next": "Set `target.{field}` in the config file or pass the matching CLI option.",
    },
    "rotation_rolled_back": {
        "what": "{operation} failed and the transaction was rolled back.",
        "next": "Fix the reported cause and rerun; no password was changed.",
    },
    "rollback_failed": {
        "what": "{operation} failed and the rollback failed as well.",
        "next": "Check the account passwords on {workload} before retrying.",
    },
    "commit_ambiguous": {
        "what": "COMMIT failed on {workload}; the rotation may or may not have been applied.",
        "next": "Verify which passwords are active on the server before retrying.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"

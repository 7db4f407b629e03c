"""Configuration loader for dualrotate."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from dualrotate.errors import RotatorError
from dualrotate.models import UserRecord


class ConfigLoader:
    """Loads YAML configuration files describing the target and the users to rotate."""

    SUPPORTED_KEYS = {
        "runtime",
        "timeout",
        "verbose",
        "log_file",
        "dry_run",
        "target",
        "users",
    }
    TARGET_KEYS = {
        "workload",
        "namespace",
        "container",
        "user",
        "host",
        "password",
        "password_env",
        "password_file",
    }
    USER_KEYS = {"username", "hosts", "password", "password_env", "password_file"}

    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise RotatorError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise RotatorError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise RotatorError("Config file must contain a YAML mapping at the root.")

        self._reject_unknown(parsed, self.SUPPORTED_KEYS, "configuration keys")

        target = parsed.get("target") or {}
        if not isinstance(target, dict):
            raise RotatorError("`target` must be a mapping.")
        self._reject_unknown(target, self.TARGET_KEYS, "target keys")

        users = parsed.get("users") or []
        if not isinstance(users, list):
            raise RotatorError("`users` must be a list of mappings.")

        timeout = parsed.get("timeout")
        if timeout is not None:
            try:
                parsed["timeout"] = float(timeout)
            except (TypeError, ValueError) as exc:
                raise RotatorError(
                    f"`timeout` must be a number of seconds, got {timeout!r}."
                ) from exc
            if parsed["timeout"] <= 0:
                raise RotatorError("`timeout` must be greater than zero.")

        return parsed

    def resolve_secret(self, entry: Dict[str, Any], label: str, required: bool = True) -> str:
        """Return the password of ``entry`` from ``password``, ``password_env`` or ``password_file``."""
        sources = [key for key in ("password", "password_env", "password_file") if key in entry]
        if len(sources) > 1:
            raise RotatorError(f"{label}: use only one of {', '.join(sources)}.")
        if not sources:
            if required:
                raise RotatorError(
                    f"{label}: missing password. Set `password`, `password_env` or `password_file`."
                )
            return ""

        source = sources[0]
        if source == "password":
            return str(entry["password"])

        if source == "password_env":
            name = str(entry["password_env"])
            if name not in self.environ:
                raise RotatorError(f"{label}: environment variable {name} is not set.")
            return self.environ[name]

        secret_path = Path(str(entry["password_file"]))
        try:
            return secret_path.read_text(encoding="utf-8").rstrip("\r\n")
        except OSError as exc:
            raise RotatorError(f"{label}: could not read password file '{secret_path}': {exc}") from exc

    def build_users(self, config: Dict[str, Any], require_passwords: bool = True) -> List[UserRecord]:
        records: List[UserRecord] = []
        for index, entry in enumerate(config.get("users") or [], start=1):
            if not isinstance(entry, dict):
                raise RotatorError(f"users[{index}] must be a mapping.")
            self._reject_unknown(entry, self.USER_KEYS, f"keys in users[{index}]")

            username = entry.get("username")
            if not username:
                raise RotatorError(f"users[{index}] is missing `username`.")

            hosts = entry.get("hosts") or []
            if isinstance(hosts, str):
                hosts = [hosts]
            if not isinstance(hosts, list):
                raise RotatorError(f"users[{index}] `hosts` must be a list of host patterns.")

            password = self.resolve_secret(
                entry, f"user '{username}'", required=require_passwords
            )
            records.append(
                UserRecord(username=str(username), password=password, hosts=tuple(str(h) for h in hosts))
            )
        return records

    @staticmethod
    def _reject_unknown(mapping: Dict[str, Any], supported, label: str):
        unknown = sorted(set(mapping.keys()) - supported)
        if unknown:
            unknown_list = ", ".join(str(key) for key in unknown)
            raise RotatorError(f"Unknown {label}: {unknown_list}")

"""Run administrative SQL through the mysql client inside the server's workload."""

import io
from abc import ABC, abstractmethod
from typing import List

from dualrotate.errors import RemoteExecError, SQLFailure, TransportFailure
from dualrotate.models import TargetSession
from dualrotate.services.redaction import describe_command, redact
from dualrotate.services.statements import escape_password


class SQLExecutor(ABC):
    """Something that can run a single SQL statement against a target server."""

    @abstractmethod
    def execute(self, statement: str) -> None:
        """Run ``statement``; raise TransportFailure or SQLFailure when it fails."""

    def close(self) -> None:
        return None


class ExecSQLExecutor(SQLExecutor):
    """Executes statements by exec'ing the mysql client in the target workload."""

    CLIENT_BINARY = "mysql"
    # Any always-present schema works; it is only a connection target.
    ADMIN_SCHEMA = "performance_schema"
    # Heuristic: a warning that happens to contain this marker is classified as a failure.
    ERROR_MARKER = "ERROR"

    def __init__(self, exec_client, session: TargetSession, logger):
        self.exec_client = exec_client
        self.session = session
        self.logger = logger
        self.closed = False

    def build_command(self, statement: str) -> List[str]:
        return [
            self.CLIENT_BINARY,
            "--database",
            self.ADMIN_SCHEMA,
            f"-p{escape_password(self.session.password)}",
            "-u",
            self.session.user,
            "-h",
            self.session.host,
            "-e",
            statement,
        ]

    def execute(self, statement: str) -> None:
        cmd = self.build_command(statement)
        stdout = io.StringIO()
        stderr = io.StringIO()

        try:
            self.exec_client.exec(
                self.session.workload,
                self.session.container,
                cmd,
                stdout,
                stderr,
            )
        except RemoteExecError as exc:
            command = describe_command(cmd)
            sout = redact(stdout.getvalue())
            serr = redact(stderr.getvalue())
            raise TransportFailure(
                f"run {command}, stdout: {sout}, stderr: {serr}: {redact(str(exc))}",
                command=command,
                stdout=sout,
                stderr=serr,
            ) from exc

        if self.ERROR_MARKER in stderr.getvalue():
            raise SQLFailure(f"sql error: {redact(stderr.getvalue())}")

    def close(self) -> None:
        self.closed = True

import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from .errors import CommitAmbiguous, OperationFailure, RollbackFailure, RotatorError
from .errors_catalog import actionable_error
from .models import TargetSession, UserRecord, WorkloadRef
from .services.command_runner import CommandRunner
from .services.redaction import mask_statement
from .services.remote_exec import RemoteExecClient
from .services.rotation import RotationManager
from .services.sql_executor import ExecSQLExecutor

console = Console()
logger = logging.getLogger("dualrotate")


class PasswordRotator:
    """Runs one rotation operation against one MySQL workload."""

    OPERATIONS = ["rotate", "discard"]
    EXIT_OK = 0
    EXIT_FAILED = 1
    EXIT_UNKNOWN_STATE = 2

    def __init__(
        self,
        operation: str,
        workload: Optional[str],
        user: Optional[str],
        password: Optional[str],
        host: Optional[str],
        users: Sequence[UserRecord],
        namespace: Optional[str] = None,
        container: str = "mysql",
        runtime: str = "kubectl",
        timeout: Optional[float] = None,
        dry_run: bool = False,
        command_runner: Optional[CommandRunner] = None,
    ):
        if operation not in self.OPERATIONS:
            raise RotatorError(
                f"Unknown operation '{operation}'. Choose one of: {', '.join(self.OPERATIONS)}."
            )
        required = (("workload", workload), ("user", user), ("host", host), ("password", password))
        for field_name, value in required:
            if not value:
                raise RotatorError(actionable_error("missing_target", field=field_name))
        if operation == "rotate":
            missing = [record.username for record in users if record.hosts and not record.password]
            if missing:
                raise RotatorError(f"New password missing for user(s): {', '.join(missing)}")

        self.operation = operation
        self.users = list(users)
        self.dry_run = dry_run
        self.session = TargetSession(
            workload=WorkloadRef(name=workload, namespace=namespace),
            user=user,
            password=password,
            host=host,
            container=container,
        )

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.exec_client = RemoteExecClient(self.command_runner, runtime=runtime, timeout=timeout)
        self.executor = ExecSQLExecutor(self.exec_client, self.session, logger)
        self.manager = RotationManager(self.executor, logger)

    def plan(self) -> List[str]:
        if self.operation == "rotate":
            statements = self.manager.plan_update(self.users)
        else:
            statements = self.manager.plan_discard(self.users)
        return [mask_statement(statement) for statement in statements]

    def _operation_label(self) -> str:
        if self.operation == "rotate":
            return "Password rotation"
        return "Discarding old passwords"

    def run(self) -> int:
        workload = str(self.session.workload)
        label = self._operation_label()
        pairs = sum(len(record.hosts) for record in self.users)

        try:
            if self.dry_run:
                console.print(f"[bold blue]Dry run:[/bold blue] {label} on {escape(workload)}")
                for statement in self.plan():
                    console.print(f"  {escape(statement)}")
                return self.EXIT_OK

            console.print(
                f"[blue]{label} on {escape(workload)} for {len(self.users)} user(s), "
                f"{pairs} account(s)...[/blue]"
            )
            if self.operation == "rotate":
                self.manager.update_user_passwords(self.users)
            else:
                self.manager.discard_old_passwords(self.users)

            console.print(f"[bold green]{label} committed on {escape(workload)}.[/bold green]")
            return self.EXIT_OK

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.warning(
                "Operation cancelled by user; the transaction on %s may have been left open "
                "without ROLLBACK. Verify the account passwords before retrying.",
                workload,
            )
            return self.EXIT_UNKNOWN_STATE
        except CommitAmbiguous as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            console.print(escape(actionable_error("commit_ambiguous", workload=workload)))
            logger.error(str(exc))
            return self.EXIT_UNKNOWN_STATE
        except RollbackFailure as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            console.print(
                escape(actionable_error("rollback_failed", operation=label, workload=workload))
            )
            logger.error(str(exc))
            return self.EXIT_UNKNOWN_STATE
        except OperationFailure as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            console.print(escape(actionable_error("rotation_rolled_back", operation=label)))
            logger.error(str(exc))
            return self.EXIT_FAILED
        except RotatorError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.error(str(exc))
            return self.EXIT_FAILED
        finally:
            self.manager.close()

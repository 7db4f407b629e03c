"""Transactional dual-password rotation over a SQL executor."""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from dualrotate.errors import CommitAmbiguous, OperationFailure, RollbackFailure, RotatorError
from dualrotate.models import TransactionState, UserRecord
from dualrotate.services import statements
from dualrotate.services.redaction import mask_statement

# (username, host, statement)
_Step = Tuple[Optional[str], Optional[str], str]


class RotationManager:
    """Sequences rotation statements inside one explicit transaction per batch.

    Uses MySQL 8 dual passwords: ``update_user_passwords`` keeps the previous
    password valid as a secondary credential until ``discard_old_passwords``
    removes it. Nothing is retried here; a failed statement is rolled back and
    reported, and a failed COMMIT is reported as ambiguous.
    """

    ALTER_USER = "alter user"
    DISCARD_OLD_PASSWORD = "discard old password"

    def __init__(self, executor, logger):
        self.executor = executor
        self.logger = logger

    def update_user_passwords(self, users: Sequence[UserRecord]) -> None:
        """Set new passwords and retain the current ones as fallback."""
        self.logger.info("Rotating passwords for %s user(s) with fallback retained.", len(users))
        self._run_transaction(self.ALTER_USER, self._steps(users, self._alter_statement))

    def discard_old_passwords(self, users: Sequence[UserRecord]) -> None:
        """Drop the retained secondary passwords of the given users."""
        self.logger.info("Discarding retained passwords for %s user(s).", len(users))
        self._run_transaction(self.DISCARD_OLD_PASSWORD, self._steps(users, self._discard_statement))

    def plan_update(self, users: Sequence[UserRecord]) -> List[str]:
        return self._plan(self._steps(users, self._alter_statement))

    def plan_discard(self, users: Sequence[UserRecord]) -> List[str]:
        return self._plan(self._steps(users, self._discard_statement))

    def close(self) -> None:
        self.executor.close()

    @staticmethod
    def _alter_statement(user: UserRecord, host: str) -> str:
        return statements.alter_user_retain_current(user.username, host, user.password)

    @staticmethod
    def _discard_statement(user: UserRecord, host: str) -> str:
        return statements.discard_old_password(user.username, host)

    @staticmethod
    def _steps(
        users: Iterable[UserRecord], build: Callable[[UserRecord, str], str]
    ) -> List[_Step]:
        return [(user.username, host, build(user, host)) for user in users for host in user.hosts]

    @staticmethod
    def _plan(steps: List[_Step]) -> List[str]:
        return (
            [statements.START_TRANSACTION]
            + [statement for _, _, statement in steps]
            + [statements.FLUSH_PRIVILEGES, statements.COMMIT]
        )

    def _execute(self, statement: str):
        self.logger.debug("Executing statement: %s", mask_statement(statement))
        self.executor.execute(statement)

    def _transition(self, state: TransactionState) -> TransactionState:
        self.logger.debug("Transaction state: %s", state.value)
        return state

    def _run_transaction(self, operation: str, steps: List[_Step]) -> None:
        state = self._transition(TransactionState.IDLE)

        try:
            self._execute(statements.START_TRANSACTION)
        except RotatorError as exc:
            raise OperationFailure("start transaction", exc) from exc
        state = self._transition(TransactionState.OPEN)

        for username, host, statement in steps:
            try:
                self._execute(statement)
            except RotatorError as exc:
                self._rollback(OperationFailure(operation, exc, username=username, host=host))

        try:
            self._execute(statements.FLUSH_PRIVILEGES)
        except RotatorError as exc:
            self._rollback(OperationFailure("flush privileges", exc))

        try:
            self._execute(statements.COMMIT)
        except RotatorError as exc:
            self._transition(TransactionState.FAILED)
            self.logger.error(
                "COMMIT failed; the outcome of the transaction is unknown and must be verified."
            )
            raise CommitAmbiguous(f"commit transaction: {exc}") from exc

        state = self._transition(TransactionState.COMMITTED)
        self.logger.info("Transaction %s for %s statement(s).", state.value, len(steps))

    def _rollback(self, failure: OperationFailure) -> None:
        self.logger.warning("Rolling back after failure: %s", failure)
        try:
            self._execute(statements.ROLLBACK)
        except RotatorError as rollback_exc:
            self._transition(TransactionState.FAILED)
            raise RollbackFailure(failure, rollback_exc) from failure.cause

        self._transition(TransactionState.ROLLED_BACK)
        raise failure from failure.cause

"""Remote command execution inside a running workload."""

from typing import List, Optional, TextIO

from dualrotate.errors import RemoteExecError, RotatorError
from dualrotate.models import WorkloadRef


class RemoteExecClient:
    """Runs an argument vector inside a pod or container and captures its streams."""

    RUNTIMES = ["kubectl", "docker"]

    def __init__(self, command_runner, runtime: str = "kubectl", timeout: Optional[float] = None):
        if runtime not in self.RUNTIMES:
            raise RotatorError(
                f"Unsupported runtime '{runtime}'. Choose one of: {', '.join(self.RUNTIMES)}."
            )
        self.command_runner = command_runner
        self.runtime = runtime
        self.timeout = timeout

    def build_command(self, workload: WorkloadRef, container: str, argv: List[str]) -> List[str]:
        if self.runtime == "docker":
            return ["docker", "exec", "-i", workload.name] + list(argv)

        cmd = ["kubectl", "exec"]
        if workload.namespace:
            cmd += ["-n", workload.namespace]
        cmd += [workload.name, "-c", container, "--"]
        return cmd + list(argv)

    def exec(
        self,
        workload: WorkloadRef,
        container: str,
        argv: List[str],
        stdout: TextIO,
        stderr: TextIO,
    ) -> None:
        """Run ``argv`` in ``container`` of ``workload``.

        Captured streams are written to ``stdout`` and ``stderr`` before any
        error is raised, so callers can inspect them on both paths.
        Raises RemoteExecError when the command cannot run or exits non-zero.
        """
        cmd = self.build_command(workload, container, argv)
        result = self.command_runner.run(
            cmd,
            check=False,
            capture_output=True,
            timeout=self.timeout,
        )

        stdout.write(result.stdout or "")
        stderr.write(result.stderr or "")

        if result.returncode != 0:
            raise RemoteExecError(f"command terminated with exit code {result.returncode}")

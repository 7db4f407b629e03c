import logging
import os

import click
from rich.logging import RichHandler

from .core import PasswordRotator, RotatorError
from .services.config_loader import ConfigLoader
from .services.redaction import RedactingFilter
from .services.remote_exec import RemoteExecClient


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


_rich_handler = RichHandler(rich_tracebacks=True, show_level=False, show_path=False)
_rich_handler.addFilter(RedactingFilter())

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[_rich_handler],
)


@click.command()
@click.argument("operation", type=click.Choice(PasswordRotator.OPERATIONS))
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .dualrotate.yml if present.",
)
@click.option("--workload", required=False, help="Pod (kubectl) or container (docker) running MySQL")
@click.option("--namespace", required=False, help="Kubernetes namespace of the pod")
@click.option(
    "--container",
    required=False,
    help="Container inside the pod that has the mysql client (default: mysql)",
)
@click.option(
    "--runtime",
    required=False,
    type=click.Choice(RemoteExecClient.RUNTIMES),
    help="How to reach the workload (default: kubectl)",
)
@click.option("--user", required=False, help="Administrative account used to connect")
@click.option("--host", required=False, help="MySQL host used in the connection")
@click.option(
    "--password-env",
    required=False,
    help="Environment variable holding the administrative account's password.",
)
@click.option(
    "--timeout",
    required=False,
    type=float,
    default=None,
    help="Timeout in seconds for each remote statement.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Print the statements that would run without touching the server.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    operation,
    config,
    workload,
    namespace,
    container,
    runtime,
    user,
    host,
    password_env,
    timeout,
    dry_run,
    verbose,
    log_file,
):
    """Rotate MySQL user passwords with dual-password fallback through kubectl/docker exec.

    OPERATION is `rotate` (set new passwords, keep the old ones valid) or
    `discard` (drop the retained old passwords).
    """
    logger = logging.getLogger("dualrotate")

    config_loader = ConfigLoader()
    try:
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), ".dualrotate.yml")
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
        target = dict(config_values.get("target") or {})
        if password_env is not None:
            for key in ("password", "password_file"):
                target.pop(key, None)
            target["password_env"] = password_env

        password = config_loader.resolve_secret(target, "target", required=False)
        users = config_loader.build_users(config_values, require_passwords=operation == "rotate")
    except RotatorError as exc:
        raise click.ClickException(str(exc)) from exc

    workload = _resolve_option(workload, target, "workload")
    namespace = _resolve_option(namespace, target, "namespace")
    container = str(_resolve_option(container, target, "container", default="mysql"))
    user = _resolve_option(user, target, "user")
    host = _resolve_option(host, target, "host")
    runtime = _resolve_option(runtime, config_values, "runtime", default="kubectl")
    timeout = _resolve_option(timeout, config_values, "timeout")
    if timeout is not None:
        timeout = float(timeout)
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        file_handler.addFilter(RedactingFilter())
        logger.addHandler(file_handler)

    try:
        rotator = PasswordRotator(
            operation=operation,
            workload=workload,
            namespace=namespace,
            container=container,
            runtime=runtime,
            user=user,
            host=host,
            password=password,
            users=users,
            timeout=timeout,
            dry_run=dry_run,
        )
    except RotatorError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(rotator.run())


if __name__ == "__main__":
    main()

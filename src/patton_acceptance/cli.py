from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path
import typer

from patton_acceptance import __version__
from patton_acceptance.core import config as config_core, envelope, process
from patton_acceptance.core.context import ExecutionContext
from patton_acceptance.core.errors import HarnessError
from patton_acceptance.core.jsonio import dumps
from patton_acceptance.core.logging_utils import setup_logging

app = typer.Typer(add_completion=False, help="patton-acceptance - run Patton the way acceptance scenarios do")


def _emit(out: dict) -> None:
    typer.echo(dumps(out))
    if out.get("ok") is True:
        raise typer.Exit(code=0)
    raise typer.Exit(code=1)


def _resolve_binary(binary: str) -> str | None:
    if os.sep in binary or (os.altsep and os.altsep in binary):
        path = Path(binary).expanduser()
        return str(path) if path.is_file() and os.access(path, os.X_OK) else None
    return shutil.which(binary)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default: $PATTON_ACCEPTANCE_LOG_LEVEL or WARNING)"),
) -> None:
    try:
        setup_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def version(json_output: bool = typer.Option(False, "--json", help="Output JSON envelope")):
    if json_output:
        _emit(envelope.ok(command="version", data={"version": __version__}))
    typer.echo(f"patton-acceptance {__version__}")


@app.command()
def doctor(json_output: bool = typer.Option(True, "--json")):
    try:
        cfg = config_core.load_harness_config()
    except ValueError as exc:
        _emit(envelope.err(command="doctor", error_type="INVALID_CONFIG", message=str(exc)))
        return
    checks: list[dict] = []

    resolved = _resolve_binary(cfg.binary_path)
    checks.append(
        {
            "name": "patton.binary",
            "ok": resolved is not None,
            "details": {
                "configured": cfg.binary_path,
                "resolved": resolved,
                "override": os.environ.get("PATTON_BINARY"),
            },
        }
    )

    db = Path(cfg.database_path).expanduser()
    checks.append(
        {
            "name": "patton.database",
            "ok": db.is_file(),
            "details": {
                "path": str(db),
                "exists": db.exists(),
                "override": os.environ.get("PATTON_DATABASE"),
            },
        }
    )

    config_file = config_core.config_path()
    checks.append(
        {
            "name": "harness.config",
            "ok": True,
            "details": {
                "path": str(config_file),
                "exists": config_file.exists(),
                "timeout": cfg.timeout,
            },
        }
    )

    _emit(envelope.ok(command="doctor", data={"checks": checks}))


@app.command()
def search(
    term: str = typer.Argument(..., help="Package name, or '-' to read a raw package listing from stdin"),
    search_type: str = typer.Option(..., "--type", "-t", help="Patton search type, e.g. cpe, wp-plugin, dpkg-l"),
    pkg_version: str = typer.Option("", "--version", "-v", help="Package version (argument mode only)"),
    json_output: bool = typer.Option(True, "--json"),
):
    """Run one Patton search exactly as the scenario steps would."""
    try:
        cfg = config_core.load_harness_config()
    except ValueError as exc:
        _emit(envelope.err(command="search", error_type="INVALID_CONFIG", message=str(exc)))
        return
    ctx = ExecutionContext.from_config(cfg)
    try:
        if term == process.STDIN_MARKER:
            ctx.params.search_term = sys.stdin.read()
            process.search_from_stdin(ctx, search_type)
            cmd = process.stdin_command(ctx)
        else:
            ctx.params.search_term = term
            ctx.params.version = pkg_version
            process.search_by_argument(ctx, search_type)
            cmd = process.argument_command(ctx)
    except HarnessError as exc:
        _emit(
            envelope.err(
                command="search",
                error_type=exc.error_type,
                message=str(exc),
                details={"stderr": process.stderr_tail(ctx)},
            )
        )
        return

    _emit(
        envelope.ok(
            command="search",
            data={
                "command": cmd,
                "exit_code": ctx.output.exit_code,
                "stdout": ctx.output.stdout,
                "stderr": ctx.output.stderr,
            },
        )
    )


if __name__ == "__main__":
    app()

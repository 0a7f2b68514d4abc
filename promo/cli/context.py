from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from promo.core.config import CONFIG_FILENAME, Config, load_config, load_config_or_default
from promo.core.errors import ErrorCode
from promo.core.result import Err
from promo.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: Config
    console: ConsoleProtocol


def build_context(*, repo: Path | None = None, config_path: Path | None = None) -> CLIContext:
    try:
        root = (repo or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: repository path does not exist: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    # An explicit --config must exist; the implicit promo.toml is optional.
    if config_path is not None:
        config_result = load_config(config_path.expanduser())
    else:
        config_result = load_config_or_default(root / CONFIG_FILENAME)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        repo_root=root,
        config=config_result.value,
        console=RichConsole(),
    )

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

import typer

from lantern.commands.command_ids import COMMAND_IDS, FINDER_COMMAND_IDS
from lantern.config import ExtensionConfig, load_extension_config
from lantern.exceptions import SnapshotError
from lantern.extension import DriverExtension
from lantern.invariants import never
from lantern.json_types import JSONObject
from lantern.runtime.json_io import dump_json_pretty, load_json_object_text
from lantern.runtime.log_policy import configure_logging
from lantern.scheduler import FrameScheduler
from lantern.tree import LiveTree, load_tree

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)

_TREE_OPTION = typer.Option(
    ...,
    "--tree",
    exists=True,
    dir_okay=False,
    readable=True,
    help="JSON snapshot of the element tree.",
)


def _config(ctx: typer.Context) -> ExtensionConfig:
    config = ctx.obj
    return config if isinstance(config, ExtensionConfig) else ExtensionConfig()


def _load_tree_option(tree_path: Path) -> LiveTree:
    try:
        return load_tree(tree_path)
    except SnapshotError as exc:
        raise typer.BadParameter(str(exc), param_hint="--tree") from exc


def build_extension(tree: LiveTree, config: ExtensionConfig) -> DriverExtension:
    return DriverExtension(tree, FrameScheduler(), config=config)


def _read_payload(payload: str | None, payload_file: Path | None) -> JSONObject:
    if (payload is None) == (payload_file is None):
        raise typer.BadParameter("provide exactly one of --payload or --payload-file")
    if payload_file is not None:
        try:
            text = payload_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(
                f"cannot read {payload_file}: {exc}", param_hint="--payload-file"
            ) from exc
    else:
        text = payload or ""
    parsed = load_json_object_text(text)
    if parsed is None:
        raise typer.BadParameter("command payload must be a JSON object")
    return parsed


async def _call_once(extension: DriverExtension, payload: JSONObject) -> JSONObject:
    scheduler = extension.scheduler
    if not isinstance(scheduler, FrameScheduler):
        never(
            "one-shot calls need the reference scheduler",
            scheduler=type(scheduler).__name__,
        )
    ticker = asyncio.ensure_future(scheduler.run(extension.config.frame_interval_s))
    try:
        return await extension.call(payload)
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", dir_okay=False, help="Path to lantern.toml."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (default: LANTERN_LOG_LEVEL or WARNING)."
    ),
) -> None:
    configure_logging(log_level, force=True)
    ctx.obj = load_extension_config(config_path=config)


@app.command("commands")
def list_commands() -> None:
    """List the registered command kinds."""
    for kind in COMMAND_IDS:
        marker = " (finder)" if kind in FINDER_COMMAND_IDS else ""
        typer.echo(f"{kind}{marker}")


@app.command("call")
def call(
    ctx: typer.Context,
    tree_path: Path = _TREE_OPTION,
    payload: str | None = typer.Option(
        None, "--payload", help="Command as a JSON object."
    ),
    payload_file: Path | None = typer.Option(
        None, "--payload-file", dir_okay=False, help="File holding the command JSON."
    ),
) -> None:
    """Dispatch one command against a tree snapshot and print the envelope."""
    command = _read_payload(payload, payload_file)
    extension = build_extension(_load_tree_option(tree_path), _config(ctx))
    response = asyncio.run(_call_once(extension, command))
    typer.echo(dump_json_pretty(response))
    if response.get("isError"):
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    ctx: typer.Context,
    tree_path: Path = _TREE_OPTION,
) -> None:
    """Serve the extension over LSP on stdio."""
    from lantern import server

    config = _config(ctx)
    extension = build_extension(_load_tree_option(tree_path), config)
    server.bind(extension, frame_interval_s=config.frame_interval_s)
    logger.info("serving %s", tree_path)
    server.start()


if __name__ == "__main__":  # pragma: no cover
    app()  # pragma: no cover

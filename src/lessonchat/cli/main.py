#!/usr/bin/env python3
"""lessonchat CLI - Inspect and normalize conversational lesson files.

This is the main entry point for the lessonchat command-line tool.
"""

import json
from pathlib import Path
from typing import Optional

import click

from lessonchat.annotations.locator import AnnotationLocator
from lessonchat.cli import progress
from lessonchat.config.loader import load_config
from lessonchat.editing.controller import EditController
from lessonchat.models.anchor import TextSelection
from lessonchat.models.block import BlockListAdapter
from lessonchat.models.config import EditorConfig
from lessonchat.models.document import ChatDocument
from lessonchat.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)

LESSON_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)

speaker_option = click.option(
    "--speaker",
    "speakers",
    multiple=True,
    help="Restrict speaker lines to these labels (repeatable)",
)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/lessonchat/config.yaml)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="LESSONCHAT_LOG_FILE",
    help="Write JSON logs here (default: ~/.cache/lessonchat/logs/lessonchat.log)",
)
@click.option("--verbose", is_flag=True, help="Show per-block detail on stderr")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    log_file: Optional[Path],
    verbose: bool,
    version: bool,
):
    """lessonchat - Author conversational lessons.

    Parse, check and normalize lesson files written in the speaker-turn
    mini-language.
    """
    if version:
        from lessonchat import __version__

        click.echo(f"lessonchat v{__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    configure_logging(log_file)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


def _read_lesson(path: Path, speakers: tuple[str, ...] = ()) -> tuple[str, ChatDocument]:
    source = path.read_text(encoding="utf-8")
    document = ChatDocument.parse(source, known_speakers=list(speakers) or None)
    logger.info("lesson_loaded", path=str(path), blocks=len(document))

    ctx = click.get_current_context()
    if ctx.obj.get("verbose"):
        click.echo(f"Loaded {len(document)} blocks from {path}", err=True)
        for index, block in enumerate(document.blocks):
            click.echo(f"  {progress.describe_block(index, block)}", err=True)

    return source, document


def _load_editor_config(ctx: click.Context) -> EditorConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValueError) as e:
        progress.show_error(str(e))
        ctx.exit(1)


@cli.command()
@click.argument("lesson", type=LESSON_FILE)
@click.option("--summary", is_flag=True, help="Print one line per block instead of JSON")
@speaker_option
def parse(lesson: Path, summary: bool, speakers: tuple[str, ...]):
    """Print the blocks of LESSON as JSON."""
    _, document = _read_lesson(lesson, speakers)

    if summary:
        for index, block in enumerate(document.blocks):
            click.echo(progress.describe_block(index, block))
        if document.explanation:
            click.echo(f"--- explanation ({len(document.explanation)} chars)")
        return

    payload = {
        "blocks": BlockListAdapter.dump_python(list(document.blocks), mode="json"),
        "explanation": document.explanation,
    }
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@cli.command(name="format")
@click.argument("lesson", type=LESSON_FILE)
@click.option("--check", is_flag=True, help="Exit with status 1 if LESSON is not in canonical form")
@speaker_option
@click.pass_context
def format_lesson(ctx: click.Context, lesson: Path, check: bool, speakers: tuple[str, ...]):
    """Print LESSON in canonical form."""
    source, document = _read_lesson(lesson, speakers)
    rendered = document.render()

    if check:
        if source.rstrip("\n") != rendered:
            progress.show_warning(f"{lesson} is not in canonical form")
            ctx.exit(1)
        click.echo(f"✓ {lesson} is canonical")
        return

    click.echo(rendered)


@cli.command()
@click.argument("lesson", type=LESSON_FILE)
@speaker_option
@click.pass_context
def check(ctx: click.Context, lesson: Path, speakers: tuple[str, ...]):
    """Verify that LESSON survives parse -> render -> parse unchanged."""
    _, document = _read_lesson(lesson, speakers)
    reparsed = ChatDocument.parse(document.render(), known_speakers=list(speakers) or None)

    failures = 0
    for index in range(max(len(document), len(reparsed))):
        before = document.block_at(index)
        after = reparsed.block_at(index)
        if before is None or after is None or not before.structurally_equals(after):
            failures += 1
            progress.show_mismatch(
                index,
                progress.describe_block(index, before) if before else "(missing)",
                progress.describe_block(index, after) if after else "(missing)",
            )

    if document.explanation != reparsed.explanation:
        failures += 1
        progress.show_error("Explanation changed across round trip")

    if failures:
        logger.warning("round_trip_failed", path=str(lesson), failures=failures)
        ctx.exit(1)

    progress.show_round_trip_ok(len(document))


@cli.command()
@click.argument("lesson", type=LESSON_FILE)
@click.argument("index", type=int)
@click.argument("start", type=int)
@click.argument("end", type=int)
@click.argument("text")
@click.pass_context
def anchor(ctx: click.Context, lesson: Path, index: int, start: int, end: int, text: str):
    """Print the annotation anchor for TEXT selected in block INDEX."""
    _, document = _read_lesson(lesson)

    block = document.block_at(index)
    if block is None:
        progress.show_error(f"No block at index {index} (lesson has {len(document)} blocks)")
        ctx.exit(1)

    result = AnnotationLocator(document).locate(
        block.id, TextSelection(start=start, end=end, text=text)
    )
    if result is None:
        progress.show_error("Selection rejected (needs at least 2 non-blank characters)")
        ctx.exit(1)

    click.echo(result.model_dump_json())


@cli.command()
@click.argument("lesson", type=LESSON_FILE)
@click.argument("index", type=int)
@click.option(
    "--to",
    "target",
    type=click.Choice(["message", "callout"]),
    required=True,
    help="Kind to convert the block to",
)
@click.pass_context
def convert(ctx: click.Context, lesson: Path, index: int, target: str):
    """Convert block INDEX of LESSON and print the resulting lesson.

    Callouts converted to messages are attributed to the configured mentor.
    """
    config = _load_editor_config(ctx)
    _, document = _read_lesson(lesson)
    controller = EditController(document, config=config)

    block = document.block_at(index)
    if block is None or not controller.convert_kind(block.id, target):
        progress.show_error(f"Block {index} cannot be converted to {target}")
        ctx.exit(1)

    click.echo(controller.text)


@cli.command()
@click.argument("lesson", type=LESSON_FILE)
@click.argument("index", type=int)
@click.argument("direction", type=click.Choice(["up", "down"]))
@click.pass_context
def move(ctx: click.Context, lesson: Path, index: int, direction: str):
    """Move block INDEX of LESSON one step and print the resulting lesson."""
    config = _load_editor_config(ctx)
    _, document = _read_lesson(lesson)
    controller = EditController(document, config=config)

    block = document.block_at(index)
    if block is None or not controller.move_block(block.id, direction):
        progress.show_error(f"Block {index} cannot move {direction}")
        ctx.exit(1)

    click.echo(controller.text)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()

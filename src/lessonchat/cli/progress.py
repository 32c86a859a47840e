"""Status display for CLI operations."""

import click

from lessonchat.models.block import Block, CalloutBlock, FreeformBlock


def describe_block(index: int, block: Block) -> str:
    """One-line summary of a block for listings.

    Args:
        index: Position of the block
        block: Block to describe

    Returns:
        Summary such as ``[2] callout 🧠 Key Takeaway: Always test...``
    """
    if isinstance(block, FreeformBlock):
        if block.freeform_payload is not None:
            state = f"{len(block.content)} bytes"
        elif block.content:
            state = "undecodable"
        else:
            state = "empty"
        return f"[{index}] freeform ({state})"

    preview = block.content.replace("\n", " ")
    if len(preview) > 50:
        preview = preview[:47] + "..."

    if isinstance(block, CalloutBlock):
        return f"[{index}] callout {block.callout_icon} {block.callout_title}: {preview}"
    return f"[{index}] {block.speaker}: {preview}"


def show_round_trip_ok(block_count: int) -> None:
    """Show that a lesson survived parse/render/parse unchanged.

    Args:
        block_count: Number of blocks checked
    """
    click.echo(f"✓ Round trip OK ({block_count} blocks)")


def show_mismatch(index: int, expected: str, actual: str) -> None:
    """Show a block that changed across a round trip."""
    click.echo(f"✗ Block {index} changed:", err=True)
    click.echo(f"    before: {expected}", err=True)
    click.echo(f"    after:  {actual}", err=True)


def show_error(message: str) -> None:
    """Show error message.

    Args:
        message: Error message to display
    """
    click.echo(f"Error: {message}", err=True)


def show_warning(message: str) -> None:
    """Show warning message.

    Args:
        message: Warning message to display
    """
    click.echo(f"Warning: {message}", err=True)

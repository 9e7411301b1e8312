import sys
from pathlib import Path
from typing import Optional

import typer

from jsonmend.buffered_reader import DEFAULT_CHUNK_SIZE_KB, stream_file_chunks, stream_text_chunks
from jsonmend.events import RepairAction, RepairEvent
from jsonmend.extract import extract_all_json, extract_json, strip_llm_wrapper
from jsonmend.incremental import IncrementalRepair
from jsonmend.repair import repair
from jsonmend.stream import iter_repair

app = typer.Typer(help="Repair incomplete or malformed JSON (LLM output, truncated files, NDJSON).")


def _stdin_is_tty() -> bool:
    return sys.stdin is None or sys.stdin.isatty()


def _echo_event(kind, position, note):
    typer.echo(RepairEvent(RepairAction(kind), position, note).format(), err=True)


def read_input(input_file: Optional[Path]) -> str:
    """Read the whole input from a file, or from stdin when it is piped."""
    if input_file is not None:
        try:
            return input_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"Error reading {input_file}: {e}", err=True)
            raise typer.Exit(code=1)
    if _stdin_is_tty():
        typer.echo("Error: No input provided. Pass a file or pipe JSON on stdin.", err=True)
        raise typer.Exit(code=1)
    return sys.stdin.read()


def write_output(text: str, input_file: Optional[Path], output_file: Optional[Path], overwrite: bool):
    target = input_file if overwrite and input_file is not None else output_file
    if target is None:
        typer.echo(text)
        return
    try:
        target.write_text(text, encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error writing {target}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Saved to: {target}", err=True)


@app.command("repair")
def repair_command(
    input_file: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="JSON file to repair (default: stdin)"
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (default: stdout)"
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Write the result back onto the input file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log repair actions to stderr"),
    extract: bool = typer.Option(
        False, "--extract", help="Strip prose, thinking blocks and fences around the JSON first"
    ),
):
    """
    Repair a whole document at once.

    Examples:
        python cli.py repair broken.json
        python cli.py repair broken.json -o fixed.json
        python cli.py repair broken.json --overwrite
        cat broken.json | python cli.py repair --verbose
    """
    text = read_input(input_file)
    if extract:
        text = strip_llm_wrapper(text)
    repaired = repair(text, on_repair=_echo_event if verbose else None)
    write_output(repaired, input_file, output_file, overwrite)


@app.command("stream")
def stream_command(
    input_file: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="JSON file to repair (default: stdin)"
    ),
    chunk_size_kb: float = typer.Option(DEFAULT_CHUNK_SIZE_KB, help="Read size per chunk in KB"),
    progress: bool = typer.Option(False, "--progress", help="Show a progress bar on stderr"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log repair actions to stderr"),
):
    """
    Repair input chunk by chunk, writing output as soon as it is final.

    No preprocessing runs in this mode. When the input holds several top-level
    values the output is comma-joined; a warning is printed on stderr.
    """
    if input_file is not None:
        chunks = stream_text_chunks(input_file, chunk_size_kb=chunk_size_kb, progress=progress)
    elif _stdin_is_tty():
        typer.echo("Error: No input provided. Pass a file or pipe JSON on stdin.", err=True)
        raise typer.Exit(code=1)
    else:
        chunks = stream_file_chunks(sys.stdin, chunk_size_kb=chunk_size_kb)

    repairer = IncrementalRepair(on_repair=_echo_event if verbose else None)
    for fragment in iter_repair(chunks, repairer=repairer):
        typer.echo(fragment, nl=False)
    typer.echo("")

    if repairer.multiple_roots:
        typer.echo(
            f"⚠️  {repairer.root_count} top-level values were joined with commas; wrap the output in [ ] to parse it",
            err=True,
        )


@app.command("extract")
def extract_command(
    input_file: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="Text file containing JSON (default: stdin)"
    ),
    all_blocks: bool = typer.Option(False, "--all", help="Print every JSON block, one per line"),
    largest: bool = typer.Option(False, "--largest", help="Pick the largest block instead of the first"),
    fix: bool = typer.Option(False, "--repair", help="Repair each extracted block"),
):
    """Pull JSON objects/arrays out of surrounding prose."""
    text = read_input(input_file)
    blocks = extract_all_json(text) if all_blocks else [extract_json(text, prefer_largest=largest)]
    for block in blocks:
        typer.echo(repair(block) if fix else block)


if __name__ == "__main__":
    app()

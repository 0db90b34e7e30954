# cli.py - Command line interface for quizmend
"""
quizmend CLI - repair Multi-Select questions in D2L-to-Canvas migrations

COMMANDS:
    quizmend scan EXPORT                          List Multi-Select questions in a D2L export
    quizmend fix EXPORT [--course-id ID] [-n]     Find and repair mismatched Canvas questions
    quizmend info                                 Show resolved configuration
    quizmend init [--course-id ID] [--force]      Write a quizmend.yaml template
    quizmend version                              Show version information

EXAMPLES:
    # See which questions D2L marks as Multi-Select
    quizmend scan ~/exports/D2LExport_1234.zip

    # Preview the repair
    quizmend fix ~/exports/D2LExport_1234.zip --course-id 5678 --dry-run

    # Repair
    quizmend fix ~/exports/D2LExport_1234.zip --course-id 5678
"""

import sys
from pathlib import Path
from typing import Optional

import click

from quizmend import __version__
from quizmend.config_utils import (
    CONFIG_FILENAME,
    create_config_template,
    get_config,
    get_course_id,
    make_canvas_api_obj,
)
from quizmend.course import CourseContext, load_export, select_source_files
from quizmend.errors import QuizmendError
from quizmend.extract import extract_records
from quizmend.icons import ERROR, SUCCESS, WARNING
from quizmend.log_utils import setup_logging
from quizmend.run import RunState, run_fix


class QuizmendContext:
    """Shared context for CLI commands"""

    def __init__(self, verbose: int = 0):
        self.work_dir = Path.cwd()
        self.verbose = verbose


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group()
@click.option('--verbose', '-v', count=True, help='Increase verbosity (-vv for debug logging)')
@click.pass_context
def cli(ctx, verbose: int):
    """
    quizmend - repair Multi-Select questions after a D2L to Canvas migration

    D2L "Multi-Select" questions often arrive in Canvas as single-answer
    multiple choice. quizmend finds them and switches them to multiple answers.
    """
    setup_logging(verbose)
    ctx.obj = QuizmendContext(verbose)


# ============================================================================
# Scan / Fix
# ============================================================================

@cli.command()
@click.argument('export', type=click.Path(exists=True, path_type=Path))
@click.pass_obj
def scan(ctx: QuizmendContext, export: Path):
    """
    List Multi-Select questions found in a D2L export

    EXPORT is the export .zip or the unzipped export directory.
    Nothing is sent to Canvas.
    """
    config = get_config(ctx.work_dir)
    try:
        files = select_source_files(load_export(export), config.prefixes)
        records = extract_records(f.xml() for f in files)
    except QuizmendError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    if not records:
        click.echo(f"{SUCCESS} No multi-select questions found in {len(files)} file(s)")
        return

    click.echo(f"Found {len(records)} multi-select question(s) in {len(files)} file(s):\n")
    for record in records:
        click.echo(f"  [{record.quiz_title}] {record.question_title}")


@cli.command()
@click.argument('export', type=click.Path(exists=True, path_type=Path))
@click.option('--course-id', type=int, help='Override course ID')
@click.option('--dry-run', '-n', is_flag=True, help='Preview changes without making them')
@click.pass_obj
def fix(ctx: QuizmendContext, export: Path, course_id: Optional[int], dry_run: bool):
    """
    Find and repair mismatched Multi-Select questions in Canvas

    Reads EXPORT, fetches the course's quizzes from Canvas, and changes every
    matching single-answer question to multiple answers.

    Examples:
        quizmend fix export.zip --course-id 12345
        quizmend fix export.zip --dry-run
    """
    try:
        config = get_config(
            ctx.work_dir,
            course_id=str(course_id) if course_id else None,
            dry_run=True if dry_run else None,
        )
        course = CourseContext(
            course_id=int(get_course_id(config)),
            content=load_export(export),
        )
        canvas = make_canvas_api_obj(config)
    except (QuizmendError, ValueError) as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    if config.dry_run:
        click.echo("[*] DRY RUN - no questions will be changed")

    result = run_fix(course, canvas, config)

    if result.state is RunState.ERROR or course.errors:
        click.echo(f"{ERROR} Finished with {len(course.errors)} error(s)", err=True)
        sys.exit(1)

    click.echo(f"{SUCCESS} Finished: {result.state.value}")


# ============================================================================
# Configuration
# ============================================================================

@cli.command()
@click.pass_obj
def info(ctx: QuizmendContext):
    """Show resolved configuration (API key masked)"""
    config = get_config(ctx.work_dir)
    for key, value in config.describe().items():
        click.echo(f"{key}: {value}")
    if not config.course_id:
        click.echo(f"{WARNING} course_id is not set")


@cli.command()
@click.option('--course-id', type=int, help='Canvas course ID')
@click.option('--force', is_flag=True, help='Overwrite an existing quizmend.yaml')
@click.pass_obj
def init(ctx: QuizmendContext, course_id: Optional[int], force: bool):
    """
    Write a quizmend.yaml template in the current directory

    Examples:
        quizmend init
        quizmend init --course-id 12345
    """
    yaml_path = ctx.work_dir / CONFIG_FILENAME
    if yaml_path.exists() and not force:
        click.echo(f"[!] {CONFIG_FILENAME} already exists (use --force to overwrite)")
        sys.exit(1)

    content = create_config_template()
    if course_id:
        content = content.replace("REPLACE_WITH_YOUR_COURSE_ID", str(course_id))
    yaml_path.write_text(content, encoding="utf-8")
    click.echo(f"{SUCCESS} Created {yaml_path}")


# ============================================================================
# Version
# ============================================================================

@cli.command()
def version():
    """Show quizmend version"""
    click.echo(f"quizmend v{__version__}")
    click.echo("Multi-Select question repair for Canvas LMS")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == '__main__':
    cli()

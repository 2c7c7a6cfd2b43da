"""
Document Review Workbench CLI

Command-line front end for reviewing extracted documents. State is kept in a
session file between commands.

Examples:

    # Extract a folder of scans (results replayed from *.extraction.json)
    docreview ingest ./inbox/

    # Review
    docreview list --type INVOICE
    docreview show doc-3f2a
    docreview correct doc-3f2a amount-2 15.00 --all
    docreview add-field doc-3f2a "Due Date"

    # Approve and export
    docreview approve --all
    docreview export --format csv -o ./exports
"""

import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import WorkbenchConfig, load_config
from .doctypes.templates import get_template
from .exceptions import DocReviewException
from .export.serializer import ExportFormat
from .gateway.base import ExtractionGateway
from .gateway.http import HTTPExtractionGateway
from .gateway.sidecar import SidecarGateway
from .intake import collect_files
from .notices import NoticeLevel
from .review.collection import ALL
from .review.review_data import DocType, DocStatus, ConfidenceLevel, DocumentData
from .review.session import ReviewSession
from .workbench import ReviewWorkbench


console = Console()

STATUS_STYLES = {
    DocStatus.PROCESSING: 'blue',
    DocStatus.EXTRACTED: 'green',
    DocStatus.REVIEW_NEEDED: 'yellow',
    DocStatus.APPROVED: 'bold green',
    DocStatus.FAILED: 'red',
}

LEVEL_STYLES = {
    ConfidenceLevel.HIGH: 'green',
    ConfidenceLevel.MEDIUM: 'yellow',
    ConfidenceLevel.LOW: 'red',
    ConfidenceLevel.MANUAL: 'cyan',
}

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: 'green',
    NoticeLevel.INFO: 'blue',
    NoticeLevel.WARNING: 'yellow',
    NoticeLevel.DANGER: 'red',
}

DOC_TYPE_CHOICES = [t.value for t in DocType]


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    logger.remove()

    log_level = "DEBUG" if verbose else "WARNING"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


@dataclass
class CLIContext:
    config: WorkbenchConfig
    session_path: Path
    verbose: bool = False


def build_gateway(config: WorkbenchConfig) -> ExtractionGateway:
    """HTTP gateway when a service URL is configured, sidecar files otherwise."""
    if config.gateway.url:
        return HTTPExtractionGateway(config.gateway)
    return SidecarGateway(config.sidecar_suffix)


def open_workbench(ctx: CLIContext) -> Tuple[ReviewSession, ReviewWorkbench]:
    session = ReviewSession.load_or_create(ctx.session_path)
    workbench = ReviewWorkbench(
        build_gateway(ctx.config),
        config=ctx.config,
        collection=session.collection,
        type_filter=session.active_filter,
    )
    if session.selected_id:
        workbench.select(session.selected_id)
    return session, workbench


def save(ctx: CLIContext, session: ReviewSession, workbench: ReviewWorkbench) -> None:
    type_filter = workbench.queue.type_filter
    session.type_filter = type_filter if type_filter == ALL else type_filter.value
    session.selected_id = workbench.selected_id
    session.save(ctx.session_path)


def resolve_document(workbench: ReviewWorkbench, ref: str) -> DocumentData:
    """Find a document by id, unique id prefix, or file name."""
    doc = workbench.collection.get(ref)
    if doc is not None:
        return doc

    matches = [
        d for d in workbench.collection
        if d.id.startswith(ref) or d.file_name == ref
    ]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise click.BadParameter(f"No document matches '{ref}'")
    raise click.BadParameter(f"'{ref}' matches {len(matches)} documents, be more specific")


def print_notices(notices) -> None:
    for notice in notices:
        style = NOTICE_STYLES.get(notice.level, 'white')
        console.print(f"[{style}]{notice.message}[/]")


def print_documents(documents, title: str = 'Documents') -> None:
    table = Table(title=title)
    table.add_column('ID', style='dim')
    table.add_column('File')
    table.add_column('Type')
    table.add_column('Status')
    table.add_column('Fields', justify='right')
    table.add_column('Needs review', justify='right')

    for doc in documents:
        style = STATUS_STYLES.get(doc.status, 'white')
        table.add_row(
            doc.id,
            doc.file_name,
            doc.doc_type.value,
            f"[{style}]{doc.status.value}[/]",
            str(len(doc.extracted_fields)),
            str(len(doc.low_confidence_fields)),
        )

    console.print(table)


def print_document(workbench: ReviewWorkbench, doc: DocumentData) -> None:
    errors = {r.field_id: r.error for r in workbench.validation_errors(doc.id)}
    labels = [f.label for f in doc.extracted_fields]

    table = Table(title=f"{doc.file_name} ({doc.doc_type.value}, {doc.status.value})")
    table.add_column('Field ID', style='dim')
    table.add_column('Label')
    table.add_column('Value')
    table.add_column('Confidence')
    table.add_column('Note')

    for f in doc.extracted_fields:
        style = LEVEL_STYLES.get(f.confidence_level, 'white')
        notes = []
        if f.id in errors:
            notes.append(f"[red]{errors[f.id]}[/]")
        if labels.count(f.label) > 1:
            notes.append('repeated label')
        table.add_row(
            f.id,
            f.label,
            f.effective_value,
            f"[{style}]{f.confidence_level.value} {f.confidence:.0%}[/]",
            ', '.join(notes),
        )

    console.print(table)

    template = get_template(doc.doc_type)
    missing = workbench.missing_fields(doc.id)
    if template.labels and missing:
        console.print(f"[dim]{template.title} not found:[/] {', '.join(missing)}")


@click.group()
@click.option(
    '--session', '-s',
    'session_path',
    type=click.Path(path_type=Path),
    default=Path('review_session.json'),
    show_default=True,
    help='Review session file'
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to workbench YAML configuration'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
@click.pass_context
def main(ctx, session_path: Path, config_path: Optional[Path], verbose: bool, log_file: Optional[Path]):
    """
    Document Review Workbench - review, correct and export AI-extracted
    document fields.
    """
    setup_logging(verbose=verbose, log_file=log_file)

    try:
        config = load_config(config_path)
    except DocReviewException as e:
        console.print(f"[bold red]Configuration error: {e}[/]")
        raise SystemExit(1)

    ctx.obj = CLIContext(config=config, session_path=session_path, verbose=verbose)


@main.command()
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option('--recursive', '-r', is_flag=True, help='Descend into subdirectories')
@click.pass_obj
def ingest(ctx: CLIContext, inputs, recursive: bool):
    """Queue files and run extraction on them."""
    try:
        sources = collect_files(
            inputs,
            extensions=ctx.config.extensions,
            recursive=recursive,
            exclude_suffix=ctx.config.sidecar_suffix,
        )
    except ValueError as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise SystemExit(1)

    if not sources:
        console.print("[yellow]No supported files found[/]")
        return

    session, workbench = open_workbench(ctx)
    console.print(f"Extracting {len(sources)} file(s) with {workbench.engine.gateway.get_service_name()}...")

    with console.status("Processing documents..."):
        documents = asyncio.run(workbench.upload(sources))

    save(ctx, session, workbench)
    print_notices(workbench.notices)
    print_documents(documents, title='Ingested')

    failed = sum(1 for d in documents if d.status == DocStatus.FAILED)
    if failed:
        console.print(f"[red]{failed} document(s) failed extraction[/]")


@main.command(name='list')
@click.option(
    '--type', '-t',
    'type_filter',
    type=click.Choice(['all'] + DOC_TYPE_CHOICES, case_sensitive=False),
    default=None,
    help='Filter by document type (remembered in the session)'
)
@click.option('--group', '-g', is_flag=True, help='Group documents by type')
@click.pass_obj
def list_documents(ctx: CLIContext, type_filter: Optional[str], group: bool):
    """List documents in the session."""
    session, workbench = open_workbench(ctx)

    if type_filter is not None:
        workbench.set_filter(ALL if type_filter.lower() == ALL else DocType.parse(type_filter))
        save(ctx, session, workbench)

    if group:
        for doc_type, members in workbench.groups().items():
            print_documents(members, title=doc_type.value)
    else:
        print_documents(workbench.filtered())

    counts = workbench.counts()
    summary = ', '.join(f"{k}: {v}" for k, v in counts.items())
    console.print(f"[bold]Counts[/] {summary}")

    stats = workbench.get_statistics()
    if stats['pending']:
        console.print(f"Processing {stats['pending']} of {stats['total']} documents...")
    if workbench.selected_id:
        console.print(f"[dim]Selected:[/] {workbench.selected_id}")


@main.command()
@click.argument('doc_ref', required=False)
@click.pass_obj
def show(ctx: CLIContext, doc_ref: Optional[str]):
    """Show a document's fields (the selected document by default)."""
    session, workbench = open_workbench(ctx)

    doc = resolve_document(workbench, doc_ref) if doc_ref else workbench.selected_document
    if doc is None:
        console.print("[yellow]No document selected.[/]")
        return

    workbench.select(doc.id)
    save(ctx, session, workbench)
    print_document(workbench, doc)


@main.command(name='next')
@click.pass_obj
def next_document(ctx: CLIContext):
    """Select the next document in the current filter."""
    session, workbench = open_workbench(ctx)
    workbench.next()
    save(ctx, session, workbench)

    print_notices(workbench.notices)
    doc = workbench.selected_document
    if doc is not None:
        print_document(workbench, doc)


@main.command()
@click.argument('doc_ref')
@click.argument('field_id')
@click.argument('value')
@click.option('--all', 'propagate', is_flag=True, help='Apply to every field with the same label')
@click.pass_obj
def correct(ctx: CLIContext, doc_ref: str, field_id: str, value: str, propagate: bool):
    """Correct a field value."""
    session, workbench = open_workbench(ctx)
    doc = resolve_document(workbench, doc_ref)

    touched = workbench.update_field(doc.id, field_id, value, propagate)
    if not touched:
        console.print(f"[yellow]No field '{field_id}' on {doc.file_name}[/]")
        return

    save(ctx, session, workbench)
    print_notices(workbench.notices)
    console.print(
        f"[green]✓ Updated {len(touched)} field(s)[/] - {doc.file_name} is now {doc.status.value}"
    )


@main.command()
@click.argument('doc_ref')
@click.argument('doc_type', type=click.Choice(DOC_TYPE_CHOICES, case_sensitive=False))
@click.pass_obj
def reclassify(ctx: CLIContext, doc_ref: str, doc_type: str):
    """Change a document's type."""
    session, workbench = open_workbench(ctx)
    doc = resolve_document(workbench, doc_ref)

    workbench.update_doc_type(doc.id, DocType.parse(doc_type))
    save(ctx, session, workbench)
    console.print(f"[green]✓ {doc.file_name} reclassified as {doc.doc_type.value}[/]")


@main.command(name='add-field')
@click.argument('doc_ref')
@click.argument('field_name')
@click.pass_obj
def add_field(ctx: CLIContext, doc_ref: str, field_name: str):
    """Ask the extraction service for one more field."""
    session, workbench = open_workbench(ctx)
    doc = resolve_document(workbench, doc_ref)

    with console.status(f"Looking for '{field_name}'..."):
        result = asyncio.run(workbench.smart_add_field(field_name, doc.id))

    if result.added:
        save(ctx, session, workbench)
    print_notices(workbench.notices)


@main.command()
@click.argument('doc_refs', nargs=-1)
@click.option('--all', 'approve_all', is_flag=True, help='Approve every reviewable document')
@click.pass_obj
def approve(ctx: CLIContext, doc_refs, approve_all: bool):
    """Approve documents."""
    if not doc_refs and not approve_all:
        raise click.UsageError('Give document ids or --all')

    session, workbench = open_workbench(ctx)

    if approve_all:
        count = workbench.approve_batch()
        console.print(f"Approved {count} document(s)")
    else:
        for ref in doc_refs:
            doc = resolve_document(workbench, ref)
            if workbench.approve(doc.id):
                console.print(f"[green]✓ Approved {doc.file_name}[/]")
            else:
                console.print(f"[yellow]{doc.file_name} is {doc.status.value}; not approved[/]")

    save(ctx, session, workbench)
    print_notices(workbench.notices)


@main.command()
@click.option(
    '--format', '-f',
    'export_format',
    type=click.Choice([f.value for f in ExportFormat], case_sensitive=False),
    default='CSV',
    show_default=True,
    help='Export format'
)
@click.option(
    '--output', '-o',
    'output_dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Output directory (defaults to the configured export directory)'
)
@click.pass_obj
def export(ctx: CLIContext, export_format: str, output_dir: Optional[Path]):
    """Export approved documents."""
    _, workbench = open_workbench(ctx)

    result = workbench.export(ExportFormat(export_format.upper()))
    print_notices(workbench.notices)

    if result.produced:
        path = workbench.exporter.write(result.artifact, output_dir or ctx.config.export_dir)
        console.print(f"[green]✓ Output written to: {path}[/]")


def run():
    try:
        main()
    except DocReviewException as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise SystemExit(1)


if __name__ == "__main__":
    run()

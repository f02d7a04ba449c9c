"""
Command Line Interface for ganttcore.

Thin wrappers that read task and snapshot files and print what the timeline
and diff engines compute from them.
"""

import json
import click
import yaml
from .version import VERSION, SNAPSHOT_SCHEMA_VERSION
from .models import TimeScale, VersionSnapshot
from .grid import build_grid, grid_for_tasks
from .mapper import layout_tasks
from .diff import diff_snapshots, diff_summary, format_change_description
from .recovery import GanttError, MigrationNeededError
from .snapshots import MigrationEngine, load_snapshot, load_tasks, read_document, save_snapshot
from .snapshots.validate import load_schema

SCALE_CHOICE = click.Choice([scale.value for scale in TimeScale])
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"])


def _fail(message: str):
    click.echo(f"❌ {message}", err=True)
    raise click.exceptions.Exit(1)


@click.group()
@click.version_option(version=VERSION, prog_name="gantt")
def main():
    """
    Gantt timeline tools - grids, task bars and version diffs.
    """
    pass


@main.command()
@click.argument('start', type=DATE_TYPE)
@click.argument('end', type=DATE_TYPE)
@click.option('-s', '--scale', type=SCALE_CHOICE, default='week', show_default=True, help='Time scale of the columns')
def grid(start, end, scale):
    """Print the columns covering START..END."""
    metrics = build_grid(start, end, scale)

    if not metrics.columns:
        click.echo("📭 Empty grid (start is after end)")
        return

    click.echo(f"📅 {len(metrics.columns)} {scale} columns, {metrics.total_width}px wide")
    for index, column in enumerate(metrics.columns):
        flags = []
        if column.is_today:
            flags.append("today")
        if column.is_weekend:
            flags.append("weekend")
        suffix = f"  ({', '.join(flags)})" if flags else ""
        click.echo(f"   {index * metrics.column_width:>6}px  {column.date:%Y-%m-%d}  {column.label}{suffix}")


@main.command()
@click.argument('tasks_file', type=click.Path(dir_okay=False))
@click.option('-s', '--scale', type=SCALE_CHOICE, default='day', show_default=True, help='Time scale of the columns')
@click.option('--start', type=DATE_TYPE, default=None, help='Grid start (default: derived from tasks)')
@click.option('--end', type=DATE_TYPE, default=None, help='Grid end (default: derived from tasks)')
def bars(tasks_file, scale, start, end):
    """Print the bar position of every task in TASKS_FILE."""
    try:
        tasks = load_tasks(tasks_file)
    except GanttError as e:
        _fail(f"Error loading tasks: {e}")

    metrics = grid_for_tasks(tasks, scale, min_date=start, max_date=end)
    click.echo(f"📅 Grid from {metrics.start_date:%Y-%m-%d}, {len(metrics.columns)} {scale} columns")

    if not tasks:
        click.echo("📭 No tasks")
        return

    for bar in layout_tasks(tasks, metrics):
        marker = "◆" if bar.task.is_milestone else "▬"
        click.echo(f"   {bar.row:>3} {marker} {bar.task.name}: left={bar.left:g}px width={bar.width:g}px")


@main.command()
@click.argument('older', type=click.Path(dir_okay=False))
@click.argument('newer', type=click.Path(dir_okay=False))
@click.option('-f', '--format', 'output_format', type=click.Choice(['text', 'yaml', 'json']), default='text', show_default=True)
@click.option('--strict', is_flag=True, help='Refuse snapshots written with an older schema')
def diff(older, newer, output_format, strict):
    """Compare two snapshot files, OLDER against NEWER."""
    try:
        report = diff_snapshots(load_snapshot(older, auto_migrate=not strict),
                                load_snapshot(newer, auto_migrate=not strict))
    except MigrationNeededError as e:
        _fail(f"{e} (run 'gantt migrate')")
    except GanttError as e:
        _fail(f"Error loading snapshots: {e}")

    if output_format == 'json':
        click.echo(json.dumps(report.model_dump(mode='json'), indent=2, ensure_ascii=False))
        return
    if output_format == 'yaml':
        click.echo(yaml.safe_dump(report.model_dump(mode='json'), sort_keys=False, allow_unicode=True))
        return

    click.echo(f"🔍 {diff_summary(report)}")
    for task in report.added:
        click.echo(f"   ➕ {task.name} ({task.id})")
    for task in report.removed:
        click.echo(f"   ➖ {task.name} ({task.id})")
    for item in report.modified:
        click.echo(f"   ✏️  {item.after.name} ({item.task_id})")
        for change in item.changes:
            click.echo(f"      {format_change_description(change)}")


@main.command()
@click.argument('tasks_file', type=click.Path(dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.option('-n', '--name', 'project_name', required=True, help='Project name stored in the snapshot')
def snapshot(tasks_file, output, project_name):
    """Save the tasks in TASKS_FILE as a snapshot document at OUTPUT."""
    try:
        tasks = load_tasks(tasks_file)
        saved = VersionSnapshot.from_tasks(project_name, tasks)
        save_snapshot(saved, output, create_dirs=True)
    except (GanttError, ValueError) as e:
        _fail(f"Error creating snapshot: {e}")

    click.echo(f"✅ Snapshot of {len(saved.tasks)} tasks written to {output}")


@main.command()
@click.option('--schema-version', 'schema_version', type=int, default=SNAPSHOT_SCHEMA_VERSION, show_default=True)
def schema(schema_version):
    """Print the JSON Schema of a snapshot document version."""
    try:
        document = load_schema(schema_version)
    except GanttError as e:
        _fail(str(e))
    click.echo(json.dumps(document, indent=2))


@main.command()
@click.argument('snapshot_file', type=click.Path(dir_okay=False))
def migrate(snapshot_file):
    """Rewrite SNAPSHOT_FILE in the current schema version."""
    engine = MigrationEngine()
    try:
        payload = read_document(snapshot_file)
        if not engine.needs_migration(payload):
            click.echo(f"📦 Already at schema v{engine.latest_version}")
            return
        save_snapshot(load_snapshot(snapshot_file), snapshot_file)
    except GanttError as e:
        _fail(f"Error migrating snapshot: {e}")

    click.echo(f"✅ Migrated {snapshot_file} to schema v{engine.latest_version}")


if __name__ == "__main__":
    main()

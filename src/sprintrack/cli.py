"""
Command Line Interface for sprintrack.
"""

import asyncio

import click

from .config import load_settings
from .models import MAX_SPRINT_LEVEL
from .recovery import SprintrackError
from .tracker import Tracker
from .version import VERSION


def _run(ctx, operation):
    """Run `operation(tracker)` against the configured store and return its result."""
    async def runner():
        settings = load_settings(ctx.obj["config_file"])
        async with Tracker.from_settings(settings) as tracker:
            return await operation(tracker)

    try:
        return asyncio.run(runner())
    except SprintrackError as e:
        click.echo(f"❌ Error: {e}")
        ctx.exit(1)


def _user(ctx) -> str:
    user = ctx.obj["user"]
    if not user:
        raise click.UsageError("A user id is required, pass --user or set SPRINTRACK_USER")
    return user


def _check(done: bool) -> str:
    return "✅" if done else "⬜"


def _echo_tasks(tasks, indent="   "):
    for item in tasks:
        click.echo(f"{indent}{_check(item.task.completed)} {item.task.title}  [{item.id}]")
        for subtask in item.subtasks:
            click.echo(f"{indent}   {_check(subtask.completed)} {subtask.title}  [{subtask.id}]")


@click.group()
@click.version_option(version=VERSION, prog_name="sprintrack")
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='Settings file (YAML)')
@click.option('--user', envvar='SPRINTRACK_USER', help='User id that owns the projects')
@click.pass_context
def main(ctx, config_file, user):
    """
    Sprintrack - projects, tasks and subtasks moving through four sprints.
    """
    ctx.obj = {"config_file": config_file, "user": user}


@main.group()
def user():
    """Manage users."""
    pass


@user.command()
@click.pass_context
def register(ctx):
    """Record the user in the store."""
    user_id = _user(ctx)
    _run(ctx, lambda t: t.register_user(user_id))
    click.echo(f"👤 Registered {user_id}")


@main.group()
def project():
    """Manage projects and their sprints."""
    pass


@project.command()
@click.argument('name')
@click.argument('description')
@click.pass_context
def create(ctx, name, description):
    """Create a project owned by the current user."""
    owner = _user(ctx)
    project_id = _run(ctx, lambda t: t.create_project(name, description, owner))
    click.echo(f"✅ Created project {project_id}")


@project.command(name='list')
@click.pass_context
def list_projects(ctx):
    """List the current user's projects."""
    owner = _user(ctx)
    projects = _run(ctx, lambda t: t.list_projects(owner))

    if not projects:
        click.echo("📭 No projects found")
        return

    for p in projects:
        click.echo(f"🗂️  {p.name}  [{p.id}]")
        click.echo(f"   🏃 Sprint {p.sprint_level}/{MAX_SPRINT_LEVEL}, {len(p.task_refs)} task(s)")


@project.command()
@click.argument('project_id')
@click.pass_context
def show(ctx, project_id):
    """Show the tasks of the project's current sprint."""
    view = _run(ctx, lambda t: t.hydrate(project_id))

    click.echo(f"📋 {view.project.name}  ({view.url})")
    click.echo(f"🏃 Sprint {view.sprint_level}/{MAX_SPRINT_LEVEL}")
    if not view.tasks:
        click.echo("   📭 No tasks in this sprint")
        return
    _echo_tasks(view.tasks)


@project.command(name='next')
@click.argument('project_id')
@click.pass_context
def next_sprint(ctx, project_id):
    """Advance the project to its next sprint."""
    outcome = _run(ctx, lambda t: t.advance_sprint(project_id))

    if outcome.reported:
        click.echo(f"🏁 All {MAX_SPRINT_LEVEL} sprints done")
        click.echo(f"💡 Use 'sprintrack project report {project_id}' to review the project")
    else:
        click.echo(f"➡️  Moved to sprint {outcome.sprint_level}/{MAX_SPRINT_LEVEL}")


@project.command()
@click.argument('project_id')
@click.pass_context
def delete(ctx, project_id):
    """Remove a project from the current user's list."""
    owner = _user(ctx)
    _run(ctx, lambda t: t.unlink_project(owner, project_id))
    click.echo(f"🗑️  Removed project {project_id} from your list")


@project.command()
@click.argument('project_id')
@click.pass_context
def report(ctx, project_id):
    """Show every task of the project grouped by sprint."""
    result = _run(ctx, lambda t: t.report(project_id))

    click.echo(f"📊 {result.project.name}")
    click.echo(f"   ✅ {result.completed_tasks}/{result.total_tasks} task(s) completed")
    for level, tasks in result.sprints.items():
        click.echo(f"🏃 Sprint {level}")
        _echo_tasks(tasks)


@main.group()
def task():
    """Manage tasks."""
    pass


@task.command(name='add')
@click.argument('project_id')
@click.argument('title')
@click.argument('description')
@click.pass_context
def add_task(ctx, project_id, title, description):
    """Add a task to the project's current sprint."""
    task_id = _run(ctx, lambda t: t.create_task(project_id, title, description))
    click.echo(f"✅ Created task {task_id}")


@task.command(name='done')
@click.argument('task_id')
@click.pass_context
def task_done(ctx, task_id):
    """Mark a task complete."""
    _run(ctx, lambda t: t.complete_task(task_id))
    click.echo(f"✅ Task {task_id} completed")


@main.group()
def subtask():
    """Manage subtasks."""
    pass


@subtask.command(name='add')
@click.argument('task_id')
@click.argument('title')
@click.argument('description')
@click.pass_context
def add_subtask(ctx, task_id, title, description):
    """Add a subtask to a task."""
    subtask_id = _run(ctx, lambda t: t.create_subtask(task_id, title, description))
    click.echo(f"✅ Created subtask {subtask_id}")


@subtask.command(name='done')
@click.argument('task_id')
@click.argument('subtask_id')
@click.pass_context
def subtask_done(ctx, task_id, subtask_id):
    """Mark a subtask complete."""
    _run(ctx, lambda t: t.complete_subtask(task_id, subtask_id))
    click.echo(f"✅ Subtask {subtask_id} completed")


if __name__ == "__main__":
    main()

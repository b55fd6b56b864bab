"""
Lawnotation command-line interface

Editor operations on tasks (replicate, merge, reassign) and annotator queue
lookups, for use outside the web frontend.
"""
import json
import os
import sys
import click
import django


def setup_django():
    """Initialize Django settings."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lawnotation.settings')
    django.setup()


def _fail(exc):
    detail = getattr(exc, 'detail', exc)
    click.echo(f"Error: {detail}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version='0.1.0')
def main():
    """Lawnotation: legal document annotation backend"""
    pass


@main.command()
@click.argument('task_id', type=int)
def replicate_task(task_id):
    """Copy a task with its assignments, annotations and relations."""
    setup_django()
    from rest_framework.exceptions import APIException
    from core.replication import replicate_task as replicate

    try:
        new_task = replicate(task_id)
    except APIException as e:
        _fail(e)

    click.echo(f"✓ Task {task_id} replicated as task {new_task.id}")


@main.command()
@click.argument('original_task_id', type=int)
@click.argument('similar_task_id', type=int)
def merge_tasks(original_task_id, similar_task_id):
    """Merge SIMILAR_TASK_ID into a copy of ORIGINAL_TASK_ID."""
    setup_django()
    from rest_framework.exceptions import APIException
    from core.replication import merge_tasks as merge

    try:
        merged = merge(original_task_id, similar_task_id)
    except APIException as e:
        _fail(e)

    click.echo(f"✓ Merged task {similar_task_id} into new task {merged.id}")


@main.command()
@click.argument('task_id', type=int)
@click.option(
    '--email',
    'emails',
    multiple=True,
    help='New e-mail per annotator slot, in slot order. Pass "" to keep a slot.',
)
def reassign(task_id, emails):
    """Bind the annotator slots of a task to other users."""
    setup_django()
    from rest_framework.exceptions import APIException
    from core.reassignment import get_all_annotators_from_task, update_assignees

    if not emails:
        for slot in get_all_annotators_from_task(task_id):
            click.echo(f"  slot {slot['annotator_number']}: {slot['email'] or '-'}")
        return

    try:
        result = update_assignees(task_id, list(emails))
    except APIException as e:
        _fail(e)

    click.echo(result.message)
    for failure in result.failures:
        click.echo(
            f"  ! slot {failure.annotator_number} ({failure.email}): {failure.reason}",
            err=True,
        )
    if not result.ok:
        sys.exit(1)


@main.command()
@click.argument('annotator_id', type=int)
@click.option('--task', 'task_id', type=int, help='Restrict to one task')
@click.option('--strategy', type=click.Choice(['ordered', 'random']), default=None)
def next_assignment(annotator_id, task_id, strategy):
    """Show the assignment an annotator should work on next."""
    setup_django()
    from rest_framework.exceptions import APIException
    from core import sequencer
    from core.serializers import AssignmentSerializer

    try:
        if task_id is None:
            assignment = sequencer.find_next_assignment_by_user(annotator_id)
        else:
            assignment = sequencer.find_next_assignment_by_user_and_task(
                annotator_id, task_id, strategy
            )
    except APIException as e:
        _fail(e)

    if assignment is None:
        click.echo("No pending assignments.")
        return
    click.echo(json.dumps(AssignmentSerializer(assignment).data, indent=2, default=str))


@main.command()
@click.argument('annotator_id', type=int)
@click.argument('task_id', type=int)
def count_assignments(annotator_id, task_id):
    """Show an annotator's next position and queue length in a task."""
    setup_django()
    from core.sequencer import count_assignments_by_user_and_task

    counts = count_assignments_by_user_and_task(annotator_id, task_id)
    click.echo(f"next: {counts['next']}  total: {counts['total']}")


@main.command()
@click.option('--reset', is_flag=True, help='Clear existing data before loading')
@click.option('--skip-confirmation', is_flag=True, help='Skip confirmation prompt when using --reset')
def load_examples(reset, skip_confirmation):
    """Load example dataset fixtures for demonstration and testing."""
    setup_django()
    from django.core.management import call_command

    args = ['load_examples']
    if reset:
        args.append('--reset')
    if skip_confirmation:
        args.append('--skip-confirmation')

    try:
        call_command(*args)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()

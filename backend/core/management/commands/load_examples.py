"""
Management command to load example datasets for demonstration purposes.
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.core.management import call_command
from django.db import connection
from core.models import (
    Project,
    Labelset,
    Document,
    Task,
    Assignment,
    Annotation,
    AnnotationRelation,
    UserProfile,
)
from core.sequencer import count_assignments_by_user_and_task


class Command(BaseCommand):
    help = 'Load example dataset fixtures for demonstration and testing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Clear existing example data before loading',
        )
        parser.add_argument(
            '--skip-confirmation',
            action='store_true',
            help='Skip confirmation prompt when using --reset',
        )

    def handle(self, *args, **options):
        reset = options['reset']
        skip_confirmation = options['skip_confirmation']

        if reset:
            if not skip_confirmation:
                self.stdout.write(
                    self.style.WARNING(
                        '\nWARNING: This will delete all existing data in the database!'
                    )
                )
                confirm = input('Are you sure you want to continue? [y/N]: ')
                if confirm.lower() != 'y':
                    self.stdout.write(self.style.ERROR('Aborted.'))
                    return

            self.stdout.write('Clearing existing data...')
            self._clear_data()
            self.stdout.write(self.style.SUCCESS('Data cleared.'))

        self.stdout.write('Loading example dataset...')

        try:
            call_command(
                'loaddata',
                'example_dataset.json',
                verbosity=options.get('verbosity', 1),
            )
            self.stdout.write(self.style.SUCCESS('\nExample dataset loaded successfully!'))
            self._print_summary()

        except Exception as e:
            self.stdout.write(
                self.style.ERROR(f'\nError loading example dataset: {str(e)}')
            )
            raise

    def _clear_data(self):
        """Clear all data from the database."""
        # Children first; Task.labelset is PROTECT.
        AnnotationRelation.objects.all().delete()
        Annotation.objects.all().delete()
        Assignment.objects.all().delete()
        Task.objects.all().delete()
        Document.objects.all().delete()
        Labelset.objects.all().delete()
        Project.objects.all().delete()
        UserProfile.objects.all().delete()
        get_user_model().objects.filter(is_superuser=False).delete()

        if connection.vendor == 'postgresql':
            with connection.cursor() as cursor:
                for table in (
                    'core_project',
                    'core_labelset',
                    'core_document',
                    'core_task',
                    'core_assignment',
                    'core_annotation',
                    'core_annotationrelation',
                ):
                    cursor.execute(f"SELECT setval('{table}_id_seq', 1, false);")

    def _print_summary(self):
        """Print a summary of the loaded data."""
        self.stdout.write('\n' + '=' * 60)
        self.stdout.write(self.style.SUCCESS('Example Dataset Summary'))
        self.stdout.write('=' * 60)

        projects = Project.objects.all().order_by('id')
        self.stdout.write(f'\nProjects ({projects.count()}):')
        for project in projects:
            task_count = Task.objects.filter(project=project).count()
            document_count = Document.objects.filter(project=project).count()
            self.stdout.write(
                f'  [{project.id}] {project.name}: '
                f'{document_count} documents, {task_count} tasks'
            )

        tasks = Task.objects.all().order_by('id')
        self.stdout.write(f'\nTasks ({tasks.count()}):')
        for task in tasks:
            self.stdout.write(f'  [{task.id}] {task.name} ({task.annotation_level})')
            slots = (
                Assignment.objects.filter(task=task, annotator__isnull=False)
                .values_list('annotator_id', 'annotator__email')
                .distinct()
                .order_by('annotator_id')
            )
            for annotator_id, email in slots:
                counts = count_assignments_by_user_and_task(annotator_id, task.id)
                self.stdout.write(
                    f'      {email}: next {counts["next"]} of {counts["total"]}'
                )

        self.stdout.write(f'\nAssignments: {Assignment.objects.count()}')
        self.stdout.write(
            f'  - Pending: {Assignment.objects.filter(status="pending").count()}'
        )
        self.stdout.write(
            f'  - Done: {Assignment.objects.filter(status="done").count()}'
        )
        self.stdout.write(f'Annotations: {Annotation.objects.count()}')
        self.stdout.write(f'Relations: {AnnotationRelation.objects.count()}')

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('\nNext steps:')
        self.stdout.write('  1. Start the development server: python manage.py runserver')
        self.stdout.write('  2. View tasks at: http://localhost:8000/api/tasks/')
        self.stdout.write('  3. Annotator overview: http://localhost:8000/api/assignments/by-annotator/?task_id=1')
        self.stdout.write('  4. Replicate a task: lawnotation replicate-task 1')
        self.stdout.write('=' * 60 + '\n')

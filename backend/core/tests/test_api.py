"""HTTP tests for the task, assignment and progress endpoints."""
from unittest.mock import patch

import pytest
from django.test import Client

from core.exceptions import IdentityProviderError
from core.models import Assignment, Task
from .helpers import make_assignment, make_documents, make_project, make_task, make_user


@pytest.mark.django_db
class TestAssignmentEndpoints:
    """Annotator queue lookups."""

    def setup_method(self):
        self.client = Client()
        self.project = make_project()
        self.task = make_task(self.project)
        self.anna = make_user('anna@example.org')
        self.docs = make_documents(self.project, 'a.txt', 'b.txt', 'c.txt')
        make_assignment(self.task, self.docs[0], self.anna, 1, 1, status='done')
        self.pending = make_assignment(self.task, self.docs[1], self.anna, 1, 2)
        make_assignment(self.task, self.docs[2], self.anna, 1, 3)

    def test_next_in_task(self):
        response = self.client.get(
            '/api/assignments/next/', {'annotator_id': self.anna.id, 'task_id': self.task.id}
        )
        assert response.status_code == 200
        assert response.json()['id'] == self.pending.id
        assert response.json()['seq_pos'] == 2

    def test_next_in_task_when_finished(self):
        Assignment.objects.filter(task=self.task).update(status='done')
        response = self.client.get(
            '/api/assignments/next/', {'annotator_id': self.anna.id, 'task_id': self.task.id}
        )
        assert response.status_code == 404

    def test_next_across_tasks_when_finished(self):
        Assignment.objects.filter(task=self.task).update(status='done')
        response = self.client.get('/api/assignments/next/', {'annotator_id': self.anna.id})
        assert response.status_code == 200
        assert response.content == b''

    def test_next_rejects_unknown_strategy(self):
        response = self.client.get(
            '/api/assignments/next/',
            {'annotator_id': self.anna.id, 'task_id': self.task.id, 'strategy': 'newest'},
        )
        assert response.status_code == 400

    def test_count(self):
        response = self.client.get(
            '/api/assignments/count/', {'annotator_id': self.anna.id, 'task_id': self.task.id}
        )
        assert response.status_code == 200
        assert response.json() == {'next': 2, 'total': 3}

    def test_count_requires_task(self):
        response = self.client.get('/api/assignments/count/', {'annotator_id': self.anna.id})
        assert response.status_code == 400

    def test_by_annotator(self):
        response = self.client.get('/api/assignments/by-annotator/', {'task_id': self.task.id})
        assert response.status_code == 200
        body = response.json()
        assert body['total'] == 1
        assert body['data'][0]['data']['amount_done'] == 1

    def test_by_document(self):
        response = self.client.get(
            '/api/assignments/by-document/', {'task_id': self.task.id, 'document': 'b.txt'}
        )
        assert response.status_code == 200
        assert response.json()['total'] == 1


@pytest.mark.django_db
class TestTaskEndpoints:
    """Editor operations on tasks."""

    def setup_method(self):
        self.client = Client()
        self.project = make_project()
        self.task = make_task(self.project)
        self.anna = make_user('anna@example.org')
        self.bram = make_user('bram@example.org')
        self.docs = make_documents(self.project, 'a.txt', 'b.txt')
        for seq, doc in enumerate(self.docs, start=1):
            make_assignment(self.task, doc, self.anna, 1, seq)
            make_assignment(self.task, doc, self.bram, 2, seq)

    def test_replicate(self):
        response = self.client.post(f'/api/tasks/{self.task.id}/replicate/')
        assert response.status_code == 201
        new_id = response.json()['id']
        assert new_id != self.task.id
        assert Assignment.objects.filter(task_id=new_id).count() == 4

    def test_replicate_missing_task(self):
        response = self.client.post('/api/tasks/999999/replicate/')
        assert response.status_code == 404

    def test_merge(self):
        similar = make_task(self.project, name='Second round')
        make_assignment(similar, self.docs[0], self.anna, 1, 1)
        response = self.client.post(
            f'/api/tasks/{self.task.id}/merge/',
            data={'similar_task_id': similar.id},
            content_type='application/json',
        )
        assert response.status_code == 201
        assert Assignment.objects.filter(task_id=response.json()['id']).count() == 5

    def test_merge_failure_is_reported(self):
        similar = make_task(self.project, name='Second round')
        stray = make_documents(self.project, 'stray.txt')[0]
        make_assignment(similar, stray, self.anna, 1, 1)
        tasks_before = Task.objects.count()

        response = self.client.post(
            f'/api/tasks/{self.task.id}/merge/',
            data={'similar_task_id': similar.id},
            content_type='application/json',
        )
        assert response.status_code == 500
        assert response.json()['detail'].startswith('Error in merge_tasks:')
        assert Task.objects.count() == tasks_before

    def test_annotators(self):
        response = self.client.get(f'/api/tasks/{self.task.id}/annotators/')
        assert response.status_code == 200
        assert [row['email'] for row in response.json()] == [
            'anna@example.org',
            'bram@example.org',
        ]

    def test_assignees_success(self):
        response = self.client.post(
            f'/api/tasks/{self.task.id}/assignees/',
            data={'new_emails': ['carla@example.org', '']},
            content_type='application/json',
        )
        assert response.status_code == 200
        body = response.json()
        assert body['outcome'] == 'success'
        assert body['message'] == 'All the assignments have been reassigned'
        assert body['annotators'][0]['email'] == 'carla@example.org'

    def test_assignees_no_changes(self):
        response = self.client.post(
            f'/api/tasks/{self.task.id}/assignees/',
            data={'new_emails': ['anna@example.org', 'bram@example.org']},
            content_type='application/json',
        )
        assert response.status_code == 200
        assert response.json()['outcome'] == 'no_op'

    def test_assignees_partial_failure(self):
        carla = make_user('carla@example.org')
        with patch(
            'core.reassignment.assign_user_to_task',
            side_effect=[carla, IdentityProviderError('down')],
        ):
            response = self.client.post(
                f'/api/tasks/{self.task.id}/assignees/',
                data={'new_emails': ['carla@example.org', 'dirk@example.org']},
                content_type='application/json',
            )
        assert response.status_code == 500
        body = response.json()
        assert body['outcome'] == 'partial_failure'
        assert body['message'] == 'Some assignment updates failed'
        assert body['failures'][0]['email'] == 'dirk@example.org'

    def test_assignees_wrong_length(self):
        response = self.client.post(
            f'/api/tasks/{self.task.id}/assignees/',
            data={'new_emails': ['carla@example.org']},
            content_type='application/json',
        )
        assert response.status_code == 400

    def test_assignees_invalid_email(self):
        response = self.client.post(
            f'/api/tasks/{self.task.id}/assignees/',
            data={'new_emails': ['not-an-address', '']},
            content_type='application/json',
        )
        assert response.status_code == 400

    def test_similar(self):
        similar = make_task(self.project, name='Second round')
        make_assignment(similar, self.docs[0], self.anna, 1, 1)
        make_assignment(similar, self.docs[0], self.bram, 2, 1)
        response = self.client.get(
            f'/api/tasks/{self.task.id}/similar/',
            {'annotators': 'anna@example.org,bram@example.org'},
        )
        assert response.status_code == 200
        assert response.json() == [{'id': similar.id, 'name': 'Second round'}]

    def test_unannotated_documents(self):
        response = self.client.get(f'/api/tasks/{self.task.id}/unannotated-documents/')
        assert response.status_code == 200
        assert response.json() == [self.docs[0].id, self.docs[1].id]

    def test_project_stats(self):
        response = self.client.get(f'/api/projects/{self.project.id}/stats/')
        assert response.status_code == 200
        assert response.json() == {'project_id': self.project.id, 'assignments': 4}


@pytest.mark.django_db
class TestValidation:
    """Serializer checks on annotations and relations."""

    def setup_method(self):
        self.client = Client()
        project = make_project()
        task = make_task(project)
        doc = make_documents(project, 'a.txt')[0]
        self.assignment = make_assignment(task, doc, make_user('anna@example.org'), 1, 1)

    def test_span_needs_both_bounds(self):
        response = self.client.post(
            '/api/annotations/',
            data={'assignment': self.assignment.id, 'label': 'Tenant', 'start_index': 3},
            content_type='application/json',
        )
        assert response.status_code == 400

    def test_document_level_annotation(self):
        response = self.client.post(
            '/api/annotations/',
            data={'assignment': self.assignment.id, 'label': 'Tenant'},
            content_type='application/json',
        )
        assert response.status_code == 201

    def test_labelset_labels_need_names(self):
        response = self.client.post(
            '/api/labelsets/',
            data={'name': 'Broken', 'labels': [{'color': '#000'}]},
            content_type='application/json',
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestHealth:

    def setup_method(self):
        self.client = Client()

    def test_liveness(self):
        response = self.client.get('/api/health/liveness/')
        assert response.status_code == 200

    def test_readiness(self):
        response = self.client.get('/api/health/readiness/')
        assert response.status_code == 200
        assert response.json()['status'] == 'ready'

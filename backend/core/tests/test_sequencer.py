"""Tests for picking and counting an annotator's assignments."""
from django.db import connection
from django.test import TestCase, override_settings
from django.test.utils import CaptureQueriesContext

from core.exceptions import NotFound
from core.models import Assignment
from core.sequencer import (
    count_assignments_by_user_and_task,
    find_assignment_by_user_task_seq,
    find_assignments_by_task_and_user,
    find_next_assignment_by_user,
    find_next_assignment_by_user_and_task,
)
from .helpers import make_assignment, make_documents, make_project, make_task, make_user


class NextAssignmentByUserAndTaskTestCase(TestCase):

    def setUp(self):
        self.project = make_project()
        self.task = make_task(self.project)
        self.annotator = make_user("anna@example.org")
        self.other = make_user("bram@example.org")
        self.docs = make_documents(self.project, "a.txt", "b.txt", "c.txt", "d.txt")

        make_assignment(self.task, self.docs[0], self.annotator, 1, 1, status="done")
        self.second = make_assignment(self.task, self.docs[1], self.annotator, 1, 2)
        self.third = make_assignment(self.task, self.docs[2], self.annotator, 1, 3)
        self.fourth = make_assignment(self.task, self.docs[3], self.annotator, 1, 4)
        make_assignment(self.task, self.docs[0], self.other, 2, 1)

    def test_ordered_returns_lowest_pending_position(self):
        assignment = find_next_assignment_by_user_and_task(
            self.annotator.id, self.task.id, "ordered"
        )
        self.assertEqual(assignment.pk, self.second.pk)

    def test_default_strategy_comes_from_settings(self):
        assignment = find_next_assignment_by_user_and_task(self.annotator.id, self.task.id)
        self.assertEqual(assignment.seq_pos, 2)

    def test_random_is_reproducible_and_pending(self):
        first = find_next_assignment_by_user_and_task(
            self.annotator.id, self.task.id, "random"
        )
        again = find_next_assignment_by_user_and_task(
            self.annotator.id, self.task.id, "random"
        )
        self.assertEqual(first.pk, again.pk)
        self.assertIn(first.pk, {self.second.pk, self.third.pk, self.fourth.pk})
        self.assertEqual(first.status, "pending")

    @override_settings(NEXT_ASSIGNMENT_STRATEGY="random")
    def test_random_strategy_from_settings(self):
        assignment = find_next_assignment_by_user_and_task(self.annotator.id, self.task.id)
        self.assertEqual(assignment.annotator_id, self.annotator.id)
        self.assertEqual(assignment.status, "pending")

    def test_unknown_strategy_rejected(self):
        with self.assertRaises(ValueError):
            find_next_assignment_by_user_and_task(self.annotator.id, self.task.id, "newest")

    def test_nothing_pending_raises_not_found(self):
        Assignment.objects.filter(annotator=self.annotator).update(status="done")
        with self.assertRaises(NotFound):
            find_next_assignment_by_user_and_task(self.annotator.id, self.task.id)

    def test_other_annotators_are_ignored(self):
        assignment = find_next_assignment_by_user_and_task(self.other.id, self.task.id)
        self.assertEqual(assignment.annotator_id, self.other.id)
        self.assertEqual(assignment.seq_pos, 1)

    def test_lookup_does_not_write(self):
        with CaptureQueriesContext(connection) as ctx:
            find_next_assignment_by_user_and_task(self.annotator.id, self.task.id, "random")
            count_assignments_by_user_and_task(self.annotator.id, self.task.id)
        statements = [q["sql"].split()[0].upper() for q in ctx.captured_queries]
        self.assertTrue(all(s == "SELECT" for s in statements), statements)


class NextAssignmentByUserTestCase(TestCase):

    def setUp(self):
        self.project = make_project()
        self.older = make_task(self.project, name="Older")
        self.newer = make_task(self.project, name="Newer")
        self.annotator = make_user("anna@example.org")
        self.docs = make_documents(self.project, "a.txt", "b.txt")

    def test_newest_task_first_then_lowest_position(self):
        make_assignment(self.older, self.docs[0], self.annotator, 1, 1)
        make_assignment(self.newer, self.docs[1], self.annotator, 1, 2)
        expected = make_assignment(self.newer, self.docs[0], self.annotator, 1, 1)

        assignment = find_next_assignment_by_user(self.annotator.id)
        self.assertEqual(assignment.pk, expected.pk)

    def test_returns_none_when_nothing_pending(self):
        make_assignment(self.older, self.docs[0], self.annotator, 1, 1, status="done")
        self.assertIsNone(find_next_assignment_by_user(self.annotator.id))


class CountAssignmentsTestCase(TestCase):

    def setUp(self):
        self.project = make_project()
        self.task = make_task(self.project)
        self.annotator = make_user("anna@example.org")
        self.docs = make_documents(self.project, *[f"doc-{i}.txt" for i in range(7)])

    def test_next_is_earliest_pending_position(self):
        make_assignment(self.task, self.docs[0], self.annotator, 1, 1, status="done")
        make_assignment(self.task, self.docs[1], self.annotator, 1, 2, status="done")
        for seq in (5, 6, 7):
            make_assignment(self.task, self.docs[seq - 1], self.annotator, 1, seq)

        counts = count_assignments_by_user_and_task(self.annotator.id, self.task.id)
        self.assertEqual(counts, {"next": 5, "total": 5})

    def test_all_done_points_past_the_end(self):
        for seq in (1, 2, 3):
            make_assignment(self.task, self.docs[seq], self.annotator, 1, seq, status="done")

        counts = count_assignments_by_user_and_task(self.annotator.id, self.task.id)
        self.assertEqual(counts, {"next": 4, "total": 3})

    def test_no_assignments(self):
        counts = count_assignments_by_user_and_task(self.annotator.id, self.task.id)
        self.assertEqual(counts, {"next": 1, "total": 0})


class AssignmentLookupTestCase(TestCase):

    def setUp(self):
        self.project = make_project()
        self.task = make_task(self.project)
        self.anna = make_user("anna@example.org")
        self.bram = make_user("bram@example.org")
        self.docs = make_documents(self.project, "a.txt", "b.txt")
        self.anna_first = make_assignment(self.task, self.docs[0], self.anna, 1, 1)
        self.anna_second = make_assignment(self.task, self.docs[1], self.anna, 1, 2)
        self.bram_first = make_assignment(self.task, self.docs[0], self.bram, 2, 1)

    def test_by_sequence_position(self):
        found = find_assignment_by_user_task_seq(self.anna.id, self.task.id, 2)
        self.assertEqual(found.pk, self.anna_second.pk)

    def test_by_sequence_position_missing(self):
        with self.assertRaises(NotFound):
            find_assignment_by_user_task_seq(self.anna.id, self.task.id, 9)

    def test_by_task_and_user_filters(self):
        self.assertEqual(
            [a.pk for a in find_assignments_by_task_and_user(self.task.id, annotator_id=self.anna.id)],
            [self.anna_first.pk, self.anna_second.pk],
        )
        self.assertEqual(
            [a.pk for a in find_assignments_by_task_and_user(self.task.id, annotator_number=2)],
            [self.bram_first.pk],
        )
        self.assertEqual(len(find_assignments_by_task_and_user(self.task.id)), 3)

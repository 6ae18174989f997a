import unittest
from datetime import datetime, timedelta, timezone

import mongomock
from bson import ObjectId

from volunteer_service.errors import NotFoundError, ValidationError
from volunteer_service.schemas import Todo, Volunteer
from volunteer_service.store import MongoStore
from volunteer_service.todos import InMemoryTodoRepository, MongoTodoRepository


class TodoRepositoryCases:
    """Behaviour shared by every TodoRepository implementation."""

    def make_repo(self):
        raise NotImplementedError

    def setUp(self):
        self.repo = self.make_repo()

    def test_insert_then_get(self):
        created_at = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        todo_id = self.repo.insert(
            Todo(
                task="Clean park",
                description="Bring gloves",
                org_name="GreenOrg",
                vol_type="outdoor",
                org_type="charity",
                time=created_at,
                volunteer=[Volunteer(volunteer_id="v1", volunteer_name="Sam")],
            )
        )

        todo = self.repo.get_by_id(todo_id)
        self.assertEqual(todo.id, todo_id)
        self.assertEqual(todo.task, "Clean park")
        self.assertEqual(todo.description, "Bring gloves")
        self.assertEqual(todo.org_name, "GreenOrg")
        self.assertEqual(todo.vol_type, "outdoor")
        self.assertEqual(todo.org_type, "charity")
        self.assertFalse(todo.completed)
        self.assertEqual(todo.time, created_at)
        # Volunteers supplied on creation are discarded.
        self.assertEqual(todo.volunteer, [])

    def test_insert_defaults_time_to_now(self):
        before = datetime.now(timezone.utc)
        todo_id = self.repo.insert(Todo(task="Sort donations"))
        todo = self.repo.get_by_id(todo_id)
        self.assertIsNotNone(todo.time)
        self.assertLess(abs(todo.time - before), timedelta(seconds=5))

    def test_insert_ignores_client_id(self):
        supplied = str(ObjectId())
        todo_id = self.repo.insert(Todo(id=supplied, task="x"))
        self.assertNotEqual(todo_id, supplied)

    def test_get_by_id_malformed_is_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.get_by_id("not-an-id")

    def test_get_by_id_missing_is_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.get_by_id(str(ObjectId()))

    def test_list_all(self):
        self.assertEqual(self.repo.list_all(), [])
        self.repo.insert(Todo(task="a"))
        self.repo.insert(Todo(task="b"))
        self.assertEqual(sorted(t.task for t in self.repo.list_all()), ["a", "b"])

    def test_list_by_organisation_is_exact_match(self):
        self.repo.insert(Todo(task="one", org_name="Acme"))
        self.repo.insert(Todo(task="two", org_name="acme"))
        self.repo.insert(Todo(task="three", org_name="Acme Corp"))
        self.repo.insert(Todo(task="four", org_name="Acme"))

        todos = self.repo.list_by_organisation("Acme")
        self.assertEqual(sorted(t.task for t in todos), ["four", "one"])
        self.assertEqual(self.repo.list_by_organisation("Nobody"), [])

    def test_list_by_volunteer_type(self):
        self.repo.insert(Todo(task="park", vol_type="outdoor"))
        self.repo.insert(Todo(task="library", vol_type="indoor"))

        todos = self.repo.list_by_volunteer_type("outdoor")
        self.assertEqual([t.task for t in todos], ["park"])

    def test_update_sets_task_and_appends_volunteers(self):
        todo_id = self.repo.insert(
            Todo(task="Clean park", description="Bring gloves", org_name="GreenOrg")
        )
        volunteer = Volunteer(volunteer_id="v1", volunteer_name="Sam")
        change = Todo(task="X", completed=True, volunteer=[volunteer])

        self.repo.update(todo_id, change)
        self.repo.update(todo_id, change)

        todo = self.repo.get_by_id(todo_id)
        self.assertEqual(todo.task, "X")
        self.assertTrue(todo.completed)
        self.assertEqual(todo.volunteer, [volunteer, volunteer])
        self.assertEqual(todo.description, "Bring gloves")
        self.assertEqual(todo.org_name, "GreenOrg")

    def test_update_overwrites_with_empty_values(self):
        todo_id = self.repo.insert(Todo(task="Clean park", completed=True))
        self.repo.update(todo_id, Todo(org_name="Ignored"))

        todo = self.repo.get_by_id(todo_id)
        self.assertEqual(todo.task, "")
        self.assertFalse(todo.completed)
        self.assertIsNone(todo.org_name)

    def test_update_malformed_id(self):
        with self.assertRaises(ValidationError):
            self.repo.update("bogus", Todo(task="x"))

    def test_delete(self):
        todo_id = self.repo.insert(Todo(task="x"))
        self.repo.delete(todo_id)
        with self.assertRaises(NotFoundError):
            self.repo.get_by_id(todo_id)

    def test_delete_missing_id_succeeds(self):
        self.repo.delete(str(ObjectId()))

    def test_delete_malformed_id(self):
        with self.assertRaises(ValidationError):
            self.repo.delete("bogus")


class InMemoryTodoRepositoryTests(TodoRepositoryCases, unittest.TestCase):
    def make_repo(self):
        return InMemoryTodoRepository()

    def test_undecodable_documents_are_skipped(self):
        self.repo.insert(Todo(task="good", org_name="Acme"))
        oid = ObjectId()
        self.repo.docs[oid] = {"_id": oid, "task": {"bad": 1}, "orgName": "Acme"}

        todos = self.repo.list_by_organisation("Acme")
        self.assertEqual([t.task for t in todos], ["good"])


class MongoTodoRepositoryTests(TodoRepositoryCases, unittest.TestCase):
    """
    Uses mongomock in place of a MongoDB server to exercise the driver calls.
    """

    def make_repo(self):
        self.store = MongoStore(client=mongomock.MongoClient())
        return MongoTodoRepository(self.store.todos)

    def test_documents_use_wire_field_names(self):
        todo_id = self.repo.insert(Todo(task="park", org_name="GreenOrg", vol_type="outdoor"))
        doc = self.store.todos.find_one({"_id": ObjectId(todo_id)})
        self.assertEqual(doc["orgName"], "GreenOrg")
        self.assertEqual(doc["volType"], "outdoor")
        self.assertEqual(doc["volunteer"], [])
        self.assertNotIn("description", doc)

    def test_undecodable_documents_are_skipped(self):
        self.repo.insert(Todo(task="good", vol_type="outdoor"))
        self.store.todos.insert_one({"task": ["not", "a", "string"], "volType": "outdoor"})

        todos = self.repo.list_by_volunteer_type("outdoor")
        self.assertEqual([t.task for t in todos], ["good"])


if __name__ == "__main__":
    unittest.main()

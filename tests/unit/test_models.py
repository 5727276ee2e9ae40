"""Unit tests for the user and task models."""

from task_tracker.models import Task, User, utc_now_iso


class TestUser:

    def test_hash_is_salted_and_verifiable(self):
        first = User.hash_password("secret")
        second = User.hash_password("secret")

        assert first != "secret"
        assert first != second, "Each hash should get its own salt"

        user = User(id=1, email="a@x.com", password_hash=first, name="A")
        assert user.verify_password("secret")
        assert not user.verify_password("wrong")

    def test_public_fields_exclude_password(self):
        user = User(id=1, email="a@x.com", password_hash="hash", name="A")

        assert user.to_public() == {"id": 1, "email": "a@x.com", "name": "A"}


class TestTask:

    def test_to_dict_uses_wire_names(self):
        task = Task(id=3, user_id=1, title="Buy milk", due_date="2030-01-01")
        data = task.to_dict()

        assert data["userId"] == 1
        assert data["dueDate"] == "2030-01-01"
        assert set(data) == {
            "id", "userId", "title", "description", "completed",
            "priority", "dueDate", "createdAt", "updatedAt",
        }

    def test_touch_always_moves_forward(self):
        task = Task(id=1, user_id=1, title="t")
        seen = [task.updated_at]
        for _ in range(5):
            task.touch()
            seen.append(task.updated_at)

        assert seen == sorted(seen)
        assert len(set(seen)) == len(seen)

    def test_timestamp_format(self):
        stamp = utc_now_iso()

        assert stamp.endswith("Z")
        assert len(stamp) == len("2024-01-01T00:00:00.000Z")

"""Tests for the cascade engine."""

from unittest.mock import patch

from task_ledger_mcp.database.paths import StorePaths


def make_chain(task_service, uid, depth, **fields):
    """Create a root with ``depth`` descendants in a single parent chain."""
    root = task_service.create_task(uid, "Root", **fields).data
    parent_id = root["id"]
    ids = [root["id"]]
    for i in range(depth):
        child = task_service.create_task(uid, f"Level {i + 1}", parent_id=parent_id, **fields).data
        ids.append(child["id"])
        parent_id = child["id"]
    return ids


class TestTaskSubtree:
    def test_soft_delete_marks_all_descendants(
        self, task_service, cascade_service, project, uid, project_counters
    ):
        ids = make_chain(task_service, uid, 3, project_id=project["id"])
        sibling = task_service.create_task(uid, "Sibling", parent_id=ids[0]).data
        assert project_counters(project["id"]) == (4, 4)

        summary = cascade_service.delete_task_subtree(uid, ids[0], soft=True)

        assert set(summary["task_ids"]) == set(ids) | {sibling["id"]}
        for task_id in summary["task_ids"]:
            assert task_service.get_task(uid, task_id).data["deleted_at"] is not None
        assert project_counters(project["id"]) == (0, 0)

    def test_hard_delete_removes_all_documents(self, task_service, cascade_service, store, uid):
        ids = make_chain(task_service, uid, 4)

        cascade_service.delete_task_subtree(uid, ids[0], soft=False)

        assert store.count(StorePaths.tasks_col(uid)) == 0

    def test_only_the_subtree_is_touched(self, task_service, cascade_service, uid):
        ids = make_chain(task_service, uid, 2)
        bystander = task_service.create_task(uid, "Bystander").data

        cascade_service.delete_task_subtree(uid, ids[1], soft=True)

        assert task_service.get_task(uid, ids[0]).data["deleted_at"] is None
        assert task_service.get_task(uid, bystander["id"]).data["deleted_at"] is None
        assert task_service.get_task(uid, ids[2]).data["deleted_at"] is not None

    def test_paginated_children(self, task_service, cascade_service, store, uid):
        root = task_service.create_task(uid, "Root").data
        for i in range(7):
            task_service.create_task(uid, f"Child {i}", parent_id=root["id"])

        with patch("task_ledger_mcp.services.cascade_service.CHILD_PAGE_SIZE", 3):
            summary = cascade_service.delete_task_subtree(uid, root["id"], soft=False)

        assert len(summary["task_ids"]) == 8
        assert store.count(StorePaths.tasks_col(uid)) == 0

    def test_parent_cycle_terminates(self, task_service, cascade_service, store, uid):
        a = task_service.create_task(uid, "A").data
        b = task_service.create_task(uid, "B", parent_id=a["id"]).data
        c = task_service.create_task(uid, "C", parent_id=b["id"]).data
        # Corrupt data: A -> C -> B -> A
        store.update(StorePaths.task_doc(uid, a["id"]), {"parentId": c["id"]})

        summary = cascade_service.delete_task_subtree(uid, a["id"], soft=False)

        assert sorted(summary["task_ids"]) == sorted([a["id"], b["id"], c["id"]])
        assert store.count(StorePaths.tasks_col(uid)) == 0

    def test_already_deleted_descendant_not_counted_twice(
        self, task_service, cascade_service, project, tag, uid, project_counters, tag_usage
    ):
        root = task_service.create_task(uid, "Root", project_id=project["id"]).data
        child = task_service.create_task(
            uid, "Child", project_id=project["id"], parent_id=root["id"], tag_ids=[tag["id"]]
        ).data
        task_service.remove_task(uid, child["id"], soft=True)
        assert project_counters(project["id"]) == (1, 1)
        assert tag_usage(tag["id"]) == 0

        cascade_service.delete_task_subtree(uid, root["id"], soft=False)

        assert project_counters(project["id"]) == (0, 0)
        assert tag_usage(tag["id"]) == 0

    def test_descendant_tags_are_released(
        self, task_service, cascade_service, tag, uid, tag_usage
    ):
        root = task_service.create_task(uid, "Root").data
        task_service.create_task(uid, "Child", parent_id=root["id"], tag_ids=[tag["id"]])

        cascade_service.delete_task_subtree(uid, root["id"], soft=True)

        assert tag_usage(tag["id"]) == 0

    def test_missing_task(self, cascade_service, uid):
        assert cascade_service.delete_task_subtree(uid, "missing") is None


class TestTaskSubtreeRestore:
    def test_restore_undoes_soft_subtree_delete(
        self, task_service, project, tag, uid, project_counters, tag_usage
    ):
        parent = task_service.create_task(uid, "Parent", project_id=project["id"]).data
        child = task_service.create_task(
            uid, "Child", project_id=project["id"], parent_id=parent["id"], tag_ids=[tag["id"]]
        ).data
        assert project_counters(project["id"]) == (2, 2)

        task_service.remove_task(uid, parent["id"], soft=True)
        assert project_counters(project["id"]) == (0, 0)
        assert tag_usage(tag["id"]) == 0

        result = task_service.restore_task(uid, parent["id"])

        assert result.data["deleted_at"] is None
        assert task_service.get_task(uid, child["id"]).data["deleted_at"] is None
        assert project_counters(project["id"]) == (2, 2)
        assert tag_usage(tag["id"]) == 1

    def test_earlier_deleted_descendant_stays_deleted(
        self, task_service, project, uid, project_counters
    ):
        ids = make_chain(task_service, uid, 2, project_id=project["id"])
        task_service.remove_task(uid, ids[2], soft=True)
        task_service.remove_task(uid, ids[0], soft=True)

        task_service.restore_task(uid, ids[0])

        assert task_service.get_task(uid, ids[1]).data["deleted_at"] is None
        assert task_service.get_task(uid, ids[2]).data["deleted_at"] is not None
        assert project_counters(project["id"]) == (2, 2)

    def test_restore_live_or_missing_task(self, task_service, cascade_service, uid):
        task = task_service.create_task(uid, "Live").data

        assert cascade_service.restore_task_subtree(uid, task["id"]).id == task["id"]
        assert cascade_service.restore_task_subtree(uid, "missing") is None


class TestProjectCascade:
    def test_soft_delete_project(
        self, task_service, cascade_service, project_service, project, tag, uid, tag_usage
    ):
        for i in range(3):
            task_service.create_task(uid, f"T{i}", project_id=project["id"], tag_ids=[tag["id"]])
        outsider = task_service.create_task(uid, "Elsewhere", tag_ids=[tag["id"]]).data

        summary = cascade_service.delete_project(uid, project["id"], soft=True)

        assert summary == {"id": project["id"], "soft": True, "tasks": 3}
        data = project_service.get_project(uid, project["id"]).data
        assert data["deleted_at"] is not None
        assert (data["task_count"], data["open_count"]) == (0, 0)
        assert tag_usage(tag["id"]) == 1
        assert task_service.get_task(uid, outsider["id"]).data["deleted_at"] is None

    def test_hard_delete_project_in_pages(self, task_service, cascade_service, store, project, uid):
        for i in range(5):
            task_service.create_task(uid, f"T{i}", project_id=project["id"])
        task_service.create_task(uid, "Elsewhere")

        with patch("task_ledger_mcp.services.cascade_service.SWEEP_PAGE_SIZE", 2):
            summary = cascade_service.delete_project(uid, project["id"], soft=False)

        assert summary["tasks"] == 5
        assert store.get(StorePaths.project_doc(uid, project["id"])) is None
        assert store.count(StorePaths.tasks_col(uid)) == 1

    def test_missing_project(self, cascade_service, uid):
        assert cascade_service.delete_project(uid, "missing") is None


class TestTagCascade:
    def test_urgent_scenario(
        self, task_service, tag_service, cascade_service, store, uid, tag_usage
    ):
        urgent = tag_service.create_tag(uid, "urgent").data
        keep = tag_service.create_tag(uid, "keep").data
        tasks = [
            task_service.create_task(uid, f"T{i}", tag_ids=[urgent["id"], keep["id"]]).data
            for i in range(3)
        ]
        assert tag_usage(urgent["id"]) == 3

        task_service.remove_task(uid, tasks[0]["id"], soft=False)
        assert tag_usage(urgent["id"]) == 2

        summary = cascade_service.delete_tag(uid, urgent["id"], remove_only=True)

        assert summary["tasks"] == 2
        assert store.get(StorePaths.tag_doc(uid, urgent["id"])) is None
        for task in tasks[1:]:
            assert task_service.get_task(uid, task["id"]).data["tag_ids"] == [keep["id"]]
        assert tag_usage(keep["id"]) == 2

    def test_delete_tag_with_tasks(
        self, task_service, cascade_service, store, project, tag, uid, project_counters
    ):
        with patch("task_ledger_mcp.services.cascade_service.SWEEP_PAGE_SIZE", 2):
            for i in range(3):
                task_service.create_task(
                    uid, f"T{i}", project_id=project["id"], tag_ids=[tag["id"]]
                )
            task_service.create_task(uid, "Untagged", project_id=project["id"])

            summary = cascade_service.delete_tag(uid, tag["id"], remove_only=False)

        assert summary["tasks"] == 3
        assert store.count(StorePaths.tasks_col(uid)) == 1
        assert project_counters(project["id"]) == (1, 1)

    def test_missing_tag(self, cascade_service, uid):
        assert cascade_service.delete_tag(uid, "missing") is None


class TestUserCascade:
    def _populate(self, task_service, project_service, tag_service, user_service, uid):
        user_service.create_user(uid, email="u1@example.com")
        project = project_service.create_project(uid, "P").data
        tag = tag_service.create_tag(uid, "T").data
        for i in range(3):
            task_service.create_task(uid, f"T{i}", project_id=project["id"], tag_ids=[tag["id"]])

    def test_soft_delete_user(
        self, task_service, project_service, tag_service, user_service, cascade_service, store, uid
    ):
        self._populate(task_service, project_service, tag_service, user_service, uid)
        other = task_service.create_task("u2", "Not mine").data

        summary = cascade_service.delete_user(uid, soft=True)

        assert summary == {
            "id": uid,
            "soft": True,
            "projects": 1,
            "tags": 1,
            "tasks": 3,
            "user": True,
        }
        for name in ("projects", "tags", "tasks"):
            docs = store.find(StorePaths.collection(uid, name))
            assert docs and all(doc["deletedAt"] for doc in docs)
        assert store.get(StorePaths.user_doc(uid))["deletedAt"]
        assert task_service.get_task("u2", other["id"]).data["deleted_at"] is None

    def test_hard_delete_user(
        self, task_service, project_service, tag_service, user_service, cascade_service, store, uid
    ):
        self._populate(task_service, project_service, tag_service, user_service, uid)

        with patch("task_ledger_mcp.services.cascade_service.SWEEP_PAGE_SIZE", 2):
            summary = cascade_service.delete_user(uid, soft=False)

        assert summary["tasks"] == 3
        assert summary["user"] is True
        for name in ("projects", "tags", "tasks"):
            assert store.count(StorePaths.collection(uid, name)) == 0
        assert store.get(StorePaths.user_doc(uid)) is None

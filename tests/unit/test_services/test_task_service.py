"""Tests for task service."""

from task_ledger_mcp.domain.entities.result_types import DomainErrorType


class TestCreateTask:
    """Tests for TaskService.create_task."""

    def test_create_task(self, task_service, project, uid):
        result = task_service.create_task(
            uid,
            title="  Write report ",
            project_id=project["id"],
            description="Quarterly numbers",
            priority="HIGH",
        )

        assert result.is_success
        assert result.data["title"] == "Write report"
        assert result.data["status"] == "TODO"
        assert result.data["priority"] == "HIGH"
        assert result.data["project_id"] == project["id"]
        assert result.data["deleted_at"] is None

    def test_defaults(self, task_service, uid):
        data = task_service.create_task(uid, title="Loose").data

        assert data["priority"] == "MEDIUM"
        assert data["project_id"] is None
        assert data["parent_id"] is None
        assert data["tag_ids"] == []
        assert data["order"] == 0

    def test_empty_title_rejected(self, task_service, uid):
        result = task_service.create_task(uid, title="   ")

        assert result.is_failure
        assert result.error_type == DomainErrorType.VALIDATION_ERROR

    def test_invalid_status_rejected(self, task_service, uid):
        result = task_service.create_task(uid, title="T", status="finished")

        assert result.is_failure
        assert "TODO" in result.error_details["valid_statuses"]

    def test_nonexistent_project(self, task_service, uid):
        result = task_service.create_task(uid, title="T", project_id="missing")

        assert result.is_failure
        assert result.error_type == DomainErrorType.NOT_FOUND

    def test_soft_deleted_project_rejected(
        self, task_service, project_service, project, uid, project_counters
    ):
        live = task_service.create_task(uid, title="Elsewhere").data
        project_service.remove_project(uid, project["id"])

        created = task_service.create_task(uid, title="T", project_id=project["id"])
        moved = task_service.move_task(uid, live["id"], project_id=project["id"])
        updated = task_service.update_task(uid, live["id"], {"project_id": project["id"]})

        for result in (created, moved, updated):
            assert result.error_type == DomainErrorType.NOT_FOUND
        assert project_counters(project["id"]) == (0, 0)

    def test_nonexistent_parent(self, task_service, uid):
        result = task_service.create_task(uid, title="T", parent_id="missing")

        assert result.error_type == DomainErrorType.NOT_FOUND

    def test_done_on_create_stamps_completion(self, task_service, project, uid, project_counters):
        data = task_service.create_task(
            uid, title="T", project_id=project["id"], status="DONE"
        ).data

        assert data["completed_at"] is not None
        assert project_counters(project["id"]) == (1, 0)

    def test_tags_deduplicated_and_counted_once(self, task_service, tag, uid, tag_usage):
        data = task_service.create_task(uid, title="T", tag_ids=[tag["id"], tag["id"]]).data

        assert data["tag_ids"] == [tag["id"]]
        assert tag_usage(tag["id"]) == 1

    def test_users_are_isolated(self, task_service, project, uid):
        result = task_service.create_task("someone-else", title="T", project_id=project["id"])

        assert result.error_type == DomainErrorType.NOT_FOUND


class TestGetAndList:
    def test_get_missing_is_null(self, task_service, uid):
        result = task_service.get_task(uid, "missing")

        assert result.is_success
        assert result.data is None

    def test_malformed_ids_are_validation_errors(self, task_service, uid):
        for task_id in ("", "a/b"):
            got = task_service.get_task(uid, task_id)
            removed = task_service.remove_task(uid, task_id)

            assert got.error_type == DomainErrorType.VALIDATION_ERROR
            assert removed.error_type == DomainErrorType.VALIDATION_ERROR

    def test_list_filters(self, task_service, project, tag, uid):
        a = task_service.create_task(uid, "A", project_id=project["id"], tag_ids=[tag["id"]]).data
        b = task_service.create_task(uid, "B", project_id=project["id"], order=1).data
        c = task_service.create_task(uid, "C").data
        task_service.complete_task(uid, b["id"])
        task_service.remove_task(uid, c["id"])

        def ids(**filters):
            return [t["id"] for t in task_service.list_tasks(uid, **filters).data]

        assert ids(project_id=project["id"]) == [a["id"], b["id"]]
        assert ids(project_id="") == [c["id"]]
        assert ids(status="DONE") == [b["id"]]
        assert ids(deleted=True) == [c["id"]]
        assert set(ids(deleted=False)) == {a["id"], b["id"]}
        assert ids(tag_ids_any=[tag["id"], "other"]) == [a["id"]]

    def test_list_due_range(self, task_service, uid):
        task_service.create_task(uid, "Jan", due_at="2024-01-15T00:00:00+00:00")
        task_service.create_task(uid, "Mar", due_at="2024-03-15T00:00:00+00:00")
        task_service.create_task(uid, "Undated")

        result = task_service.list_tasks(
            uid, due_after="2024-01-01T00:00:00+00:00", due_before="2024-02-01T00:00:00+00:00"
        )

        assert [t["title"] for t in result.data] == ["Jan"]

    def test_list_pagination(self, task_service, uid):
        for i in range(5):
            task_service.create_task(uid, f"T{i}", order=i)

        first = task_service.list_tasks(uid, limit=2).data
        second = task_service.list_tasks(uid, limit=2, start_after_id=first[-1]["id"]).data
        stale_cursor = task_service.list_tasks(uid, limit=2, start_after_id="missing").data

        assert [t["title"] for t in first] == ["T0", "T1"]
        assert [t["title"] for t in second] == ["T2", "T3"]
        assert [t["title"] for t in stale_cursor] == ["T0", "T1"]

    def test_list_limit_is_clamped(self, task_service, uid):
        for i in range(3):
            task_service.create_task(uid, f"T{i}")

        assert len(task_service.list_tasks(uid, limit=0).data) == 1

    def test_list_invalid_due_filter(self, task_service, uid):
        result = task_service.list_tasks(uid, due_after="next tuesday")

        assert result.error_type == DomainErrorType.VALIDATION_ERROR


class TestUpdateTask:
    def test_update_fields(self, task_service, uid):
        task = task_service.create_task(uid, "T").data

        result = task_service.update_task(
            uid, task["id"], {"title": "Renamed", "url": "https://example.com"}
        )

        assert result.data["title"] == "Renamed"
        assert result.data["url"] == "https://example.com"

    def test_unknown_field_rejected(self, task_service, uid):
        task = task_service.create_task(uid, "T").data

        result = task_service.update_task(uid, task["id"], {"task_count": 5})

        assert result.error_type == DomainErrorType.VALIDATION_ERROR

    def test_update_missing_task_is_null(self, task_service, uid):
        result = task_service.update_task(uid, "missing", {"title": "x"})

        assert result.is_success
        assert result.data is None

    def test_status_change_adjusts_open_count(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data

        done = task_service.update_task(uid, task["id"], {"status": "DONE"}).data
        assert done["completed_at"] is not None
        assert project_counters(project["id"]) == (1, 0)

        reopened = task_service.update_task(uid, task["id"], {"status": "IN_PROGRESS"}).data
        assert reopened["completed_at"] is None
        assert project_counters(project["id"]) == (1, 1)

    def test_tag_change_adjusts_usage(self, task_service, tag_service, tag, uid, tag_usage):
        other = tag_service.create_tag(uid, "later").data
        task = task_service.create_task(uid, "T", tag_ids=[tag["id"]]).data

        task_service.update_task(uid, task["id"], {"tag_ids": [other["id"]]})

        assert tag_usage(tag["id"]) == 0
        assert tag_usage(other["id"]) == 1

    def test_project_change_to_missing_project(self, task_service, uid):
        task = task_service.create_task(uid, "T").data

        result = task_service.update_task(uid, task["id"], {"project_id": "missing"})

        assert result.error_type == DomainErrorType.NOT_FOUND


class TestLifecycle:
    def test_work_project_scenario(self, task_service, project_service, uid, project_counters):
        work = project_service.create_project(uid, "Work").data
        assert project_counters(work["id"]) == (0, 0)

        task = task_service.create_task(uid, "A", project_id=work["id"], status="TODO").data
        assert project_counters(work["id"]) == (1, 1)

        task_service.complete_task(uid, task["id"])
        assert project_counters(work["id"]) == (1, 0)

        task_service.remove_task(uid, task["id"], soft=True)
        assert project_counters(work["id"]) == (0, 0)

        task_service.restore_task(uid, task["id"])
        assert project_counters(work["id"]) == (1, 0)

    def test_complete_uncomplete_round_trip(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data
        before = project_counters(project["id"])

        task_service.complete_task(uid, task["id"])
        assert project_counters(project["id"])[0] == before[0]
        task_service.uncomplete_task(uid, task["id"])

        assert project_counters(project["id"]) == before

    def test_complete_is_idempotent(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data

        first = task_service.complete_task(uid, task["id"]).data
        second = task_service.complete_task(uid, task["id"]).data

        assert second["completed_at"] == first["completed_at"]
        assert project_counters(project["id"]) == (1, 0)

    def test_archive_and_unarchive(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data

        archived = task_service.archive_task(uid, task["id"]).data
        assert archived["archived_at"] is not None
        assert project_counters(project["id"]) == (1, 0)

        task_service.archive_task(uid, task["id"])
        assert project_counters(project["id"]) == (1, 0)

        task_service.unarchive_task(uid, task["id"])
        assert project_counters(project["id"]) == (1, 1)

    def test_soft_delete_twice_is_noop(
        self, task_service, project, tag, uid, project_counters, tag_usage
    ):
        task = task_service.create_task(
            uid, "T", project_id=project["id"], tag_ids=[tag["id"]]
        ).data

        task_service.remove_task(uid, task["id"], soft=True)
        task_service.remove_task(uid, task["id"], soft=True)

        assert project_counters(project["id"]) == (0, 0)
        assert tag_usage(tag["id"]) == 0

        task_service.restore_task(uid, task["id"])
        assert project_counters(project["id"]) == (1, 1)
        assert tag_usage(tag["id"]) == 1

    def test_restore_of_live_task_is_noop(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data

        task_service.restore_task(uid, task["id"])

        assert project_counters(project["id"]) == (1, 1)

    def test_tags_counted_once_per_task(self, task_service, tag_service, uid, tag_usage):
        tags = [tag_service.create_tag(uid, f"tag{i}").data["id"] for i in range(3)]

        task = task_service.create_task(uid, "T", tag_ids=tags).data
        assert [tag_usage(t) for t in tags] == [1, 1, 1]

        task_service.remove_task(uid, task["id"], soft=False)
        assert [tag_usage(t) for t in tags] == [0, 0, 0]

    def test_lifecycle_on_missing_task_is_noop(self, task_service, uid):
        for operation in (
            task_service.complete_task,
            task_service.uncomplete_task,
            task_service.archive_task,
            task_service.unarchive_task,
            task_service.restore_task,
            task_service.remove_task,
        ):
            result = operation(uid, "missing")
            assert result.is_success
            assert result.data is None


class TestMoveAndReorder:
    def test_move_open_task(self, task_service, project_service, uid, project_counters):
        a = project_service.create_project(uid, "A").data
        b = project_service.create_project(uid, "B").data
        task = task_service.create_task(uid, "T", project_id=a["id"]).data

        result = task_service.move_task(uid, task["id"], project_id=b["id"])

        assert result.data["project_id"] == b["id"]
        assert project_counters(a["id"]) == (0, 0)
        assert project_counters(b["id"]) == (1, 1)

    def test_move_closed_task(self, task_service, project_service, uid, project_counters):
        a = project_service.create_project(uid, "A").data
        b = project_service.create_project(uid, "B").data
        task = task_service.create_task(uid, "T", project_id=a["id"], status="DONE").data

        task_service.move_task(uid, task["id"], project_id=b["id"])

        assert project_counters(a["id"]) == (0, 0)
        assert project_counters(b["id"]) == (1, 0)

    def test_move_omitted_keeps_and_none_clears(self, task_service, project, uid, project_counters):
        parent = task_service.create_task(uid, "Parent").data
        task = task_service.create_task(
            uid, "T", project_id=project["id"], parent_id=parent["id"]
        ).data

        kept = task_service.move_task(uid, task["id"], parent_id=None).data
        assert kept["project_id"] == project["id"]
        assert kept["parent_id"] is None

        cleared = task_service.move_task(uid, task["id"], project_id=None, order=4).data
        assert cleared["project_id"] is None
        assert cleared["order"] == 4
        assert project_counters(project["id"]) == (0, 0)

    def test_move_under_own_descendant_rejected(self, task_service, uid):
        root = task_service.create_task(uid, "Root").data
        child = task_service.create_task(uid, "Child", parent_id=root["id"]).data
        grandchild = task_service.create_task(uid, "Grandchild", parent_id=child["id"]).data

        result = task_service.move_task(uid, root["id"], parent_id=grandchild["id"])

        assert result.error_type == DomainErrorType.BUSINESS_RULE_VIOLATION
        assert result.error_details["rule"] == "no_parent_cycle"

    def test_move_under_itself_rejected(self, task_service, uid):
        task = task_service.create_task(uid, "T").data

        result = task_service.move_task(uid, task["id"], parent_id=task["id"])

        assert result.error_details["rule"] == "no_self_parent"

    def test_move_to_missing_project(self, task_service, uid):
        task = task_service.create_task(uid, "T").data

        assert task_service.move_task(uid, task["id"], project_id="missing").is_failure

    def test_reorder(self, task_service, project, uid, project_counters):
        task = task_service.create_task(uid, "T", project_id=project["id"]).data

        assert task_service.reorder_task(uid, task["id"], 9).data["order"] == 9
        assert task_service.reorder_task(uid, task["id"], -1).is_failure
        assert task_service.reorder_task(uid, "missing", 1).data is None
        assert project_counters(project["id"]) == (1, 1)

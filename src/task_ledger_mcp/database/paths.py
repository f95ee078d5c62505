"""Deterministic document and collection paths, namespaced per user."""

from typing import Tuple


def split_path(path: str) -> Tuple[str, str]:
    """Split a document path into (collection path, document id)."""
    path = path.strip("/")
    segments = path.split("/")
    if len(segments) < 2 or len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


def join_path(collection: str, doc_id: str) -> str:
    """Build a document path from its collection path and id."""
    return f"{collection.strip('/')}/{doc_id}"


class StorePaths:
    """Path helpers for user, project, tag and task documents."""

    users_col = "users"

    @staticmethod
    def user_doc(uid: str) -> str:
        return f"users/{uid}"

    @staticmethod
    def projects_col(uid: str) -> str:
        return f"users/{uid}/projects"

    @staticmethod
    def tags_col(uid: str) -> str:
        return f"users/{uid}/tags"

    @staticmethod
    def tasks_col(uid: str) -> str:
        return f"users/{uid}/tasks"

    @classmethod
    def collection(cls, uid: str, name: str) -> str:
        return f"{cls.user_doc(uid)}/{name}"

    @classmethod
    def project_doc(cls, uid: str, project_id: str) -> str:
        return join_path(cls.projects_col(uid), project_id)

    @classmethod
    def tag_doc(cls, uid: str, tag_id: str) -> str:
        return join_path(cls.tags_col(uid), tag_id)

    @classmethod
    def task_doc(cls, uid: str, task_id: str) -> str:
        return join_path(cls.tasks_col(uid), task_id)

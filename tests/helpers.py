"""Document builders and async helpers shared by the tests."""

import asyncio


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def project_doc(name="Demo", sprint_level=1, tasks=None):
    doc = {
        "name": name,
        "description": f"{name} description",
        "start_time": "2024-01-01T00:00:00+00:00",
        "active": True,
        "sprint_level": sprint_level,
    }
    if tasks:
        doc["tasks"] = tasks
    return doc


def task_doc(title="Task", subtasks=None, completed=False):
    doc = {
        "title": title,
        "description": f"{title} description",
        "completed": completed,
        "created": "2024-01-02T00:00:00+00:00",
    }
    if subtasks:
        doc["subtasks"] = subtasks
    return doc


def subtask_doc(title="Subtask", **extra):
    return {"title": title, "description": f"{title} description", **extra}


def task_ids(view):
    """Keys of the tasks in a hydrated project."""
    return {t.id for t in view.tasks}


def find_task(view, task_id):
    return next((t for t in view.tasks if t.id == task_id), None)

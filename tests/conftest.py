"""Shared fixtures for KeepTrack board tests."""

from dataclasses import replace

import pytest

from keeptrack.cache import LocalCache, MemoryStorage
from keeptrack.errors import RemoteError, TransportError
from keeptrack.gateway import ProjectGateway
from keeptrack.schema import Project


class FakeGateway(ProjectGateway):
    """In-memory stand-in for the REST API. Inherits the try_* wrappers."""

    def __init__(self, projects=None):
        super().__init__("http://api.test")
        self.server = {p.id: p for p in (projects or [])}
        self.fail_ids = set()
        self.fail_fetch = None
        self.fetch_calls = 0
        self.updates = []
        self.on_update = None

    def fetch_all(self):
        self.fetch_calls += 1
        if self.fail_fetch:
            raise self.fail_fetch
        return sorted(self.server.values(), key=lambda p: p.order)

    def fetch_one(self, project_id):
        if project_id not in self.server:
            raise RemoteError("There was an error retrieving the project(s). Please try again.", 404)
        return self.server[project_id]

    def update(self, project):
        project.require_id()
        project.validate()
        self.updates.append(project)
        if self.on_update:
            self.on_update(project)
        if project.id in self.fail_ids:
            raise RemoteError("There was an error updating the project. Please try again.", 500)
        stored = replace(project)
        self.server[project.id] = stored
        return replace(stored)


def make_project(id, status="todo", order=0, name=None, **kwargs):
    return Project(id=id, name=name or f"Project {id}", status=status, order=order, **kwargs)


@pytest.fixture
def projects():
    """Scenario board: todo=[1, 2], done=[3]."""
    return [
        make_project(1, "todo", 0),
        make_project(2, "todo", 1),
        make_project(3, "done", 0),
    ]


@pytest.fixture
def gateway(projects):
    return FakeGateway(projects)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage):
    return LocalCache(storage)


@pytest.fixture
def transport_error():
    return TransportError("There was an error retrieving the projects. Please try again.")

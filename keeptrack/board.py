"""
Board state controller: the only owner of the working set.

Applies moves and edits optimistically, then persists each affected project
independently through the gateway. A failed save rolls back that one
project to its pre-change snapshot; siblings keep their changes.

All mutation happens on the asyncio event loop. Gateway calls are blocking
requests calls pushed to a worker thread, and they are the only points
where another coroutine can observe the (optimistic) working set.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from .cache import LocalCache
from .errors import Failure, NotFoundError, ValidationError
from .reorder import MoveEvent, OrderChange, compute_move, group_by_status
from .schema import Project

logger = logging.getLogger(__name__)


class LoadState(Enum):
    NOT_LOADED = "not_loaded"
    CACHED = "cached"      # working set came from the local cache
    FETCHED = "fetched"    # working set came from the API


class BoardController:
    """Working set + optimistic update / rollback."""

    def __init__(self, gateway, cache: Optional[LocalCache] = None):
        self.gateway = gateway
        self.cache = cache if cache is not None else LocalCache()
        self.load_state = LoadState.NOT_LOADED
        self.error: Optional[str] = None
        self._projects: List[Project] = []
        self.subscribers: Dict[str, list] = {}  # event -> callbacks

    # ── listeners ──────────────────────────────

    def subscribe(self, event: str, callback: Callable) -> None:
        """Register a callback for "changed" or "error"."""
        self.subscribers.setdefault(event, []).append(callback)

    def _emit(self, event: str, **kwargs) -> None:
        for callback in self.subscribers.get(event, []):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception(f"Error in {event} callback")

    def _surface(self, message: str) -> None:
        self.error = message
        self._emit("error", message=message)

    def clear_error(self) -> None:
        self.error = None

    # ── queries ────────────────────────────────

    @property
    def projects(self) -> List[Project]:
        return list(self._projects)

    def find(self, project_id: int) -> Optional[Project]:
        return next((p for p in self._projects if p.id == project_id), None)

    def get_by_column(self) -> Dict[str, List[Project]]:
        """Per-column, order-sorted view. Recomputed on every call."""
        return group_by_status(self._projects)

    # ── working-set writes (keyed by id) ───────

    def _replace(self, project: Project) -> None:
        self._projects = [project if p.id == project.id else p for p in self._projects]
        self._emit("changed", project_id=project.id)

    def _sync_cache(self) -> None:
        if self.load_state is not LoadState.NOT_LOADED:
            self.cache.save(self._projects)

    # ── commands ───────────────────────────────

    async def load(self) -> List[Project]:
        """
        Cache-first load. A cached list wins over the network; otherwise
        fetch, seed the cache, and use the fetched list.

        Raises the gateway error on fetch failure; the working set stays empty.
        """
        cached = self.cache.load()
        if cached is not None:
            logger.info(f"Loading projects from cache: {len(cached)}")
            self._projects = cached
            self.load_state = LoadState.CACHED
            self._emit("changed", project_id=None)
            return self.projects

        return await self._fetch()

    async def refetch(self) -> List[Project]:
        """Ignore the cache, reload from the API, and overwrite the cache."""
        return await self._fetch()

    async def _fetch(self) -> List[Project]:
        result = await asyncio.to_thread(self.gateway.try_fetch_all)
        if isinstance(result, Failure):
            logger.error(f"Failed to fetch projects: {result.error}")
            self._surface(result.message)
            raise result.error

        self._projects = list(result.value)
        self.load_state = LoadState.FETCHED
        self.error = None
        if self.cache.save(self._projects):
            self.cache.mark_seeded()
        logger.info(f"Fetched {len(self._projects)} projects from the API")
        self._emit("changed", project_id=None)
        return self.projects

    async def apply_move(self, event: MoveEvent) -> List[OrderChange]:
        """
        Apply a drag-and-drop move. Returns the changes that were applied
        (empty for a cancelled drop, a no-op, or an unknown id).
        """
        if event.is_cancelled:
            return []

        try:
            changes = compute_move(self._projects, event)
        except NotFoundError as e:
            # rendering-layer inconsistency, nothing for the user to act on
            logger.warning(f"Ignoring move: {e}")
            return []

        if not changes:
            return []

        snapshots = {c.project_id: c.project for c in changes}
        for change in changes:
            self._replace(change.apply())
        self._sync_cache()

        await asyncio.gather(*(
            self._persist(self.find(c.project_id), snapshots[c.project_id])
            for c in changes
        ))
        return changes

    async def save_project(self, project: Project) -> bool:
        """
        Single-project edit path. Returns True if the server accepted it.
        The project must already be in the working set. Form checks (name,
        budget, status) run first; a rejected edit leaves the board untouched.
        """
        previous = self.find(project.id)
        if previous is None:
            logger.warning(f"Ignoring save for unknown project {project.id}")
            return False
        try:
            project.validate_form()
        except ValidationError as e:
            logger.warning(f"Rejected edit of project {project.id}: {e}")
            self._surface(e.message)
            return False
        self._replace(project)
        self._sync_cache()
        return await self._persist(project, previous)

    async def _persist(self, project: Project, snapshot: Project) -> bool:
        """Send one project; commit the server record or roll back to snapshot."""
        logger.debug(f"Updating project {project.id} (status={project.status}, order={project.order})")
        result = await asyncio.to_thread(self.gateway.try_update, project)

        if isinstance(result, Failure):
            logger.warning(f"Update of project {project.id} failed, rolling back: {result.error}")
            self._replace(snapshot)
            self._sync_cache()
            self._surface(result.message)
            return False

        saved = result.value
        if saved.id is None:
            saved.id = project.id
        self._replace(saved)
        self._sync_cache()
        return True

"""
Delivery of rendered maps into a page.

Fetches the rendered markup of a map from the hosting service, injects it
into the map's container and starts the page modules that work on the
rendered map. Failures are logged and leave the container untouched.
"""

import logging
from typing import Any, Awaitable, Callable, Iterable, MutableMapping, Protocol

logger = logging.getLogger(__name__)

CONTAINER_PREFIX = "learningmap-render-container-"


class Collaborator(Protocol):
    """A page module initialized after the map has been injected."""

    def init(self, cm_id: int, inmodal: bool) -> Any:
        ...


def container_id(cm_id: int, inmodal: bool = False) -> str:
    """Id of the element that receives the map markup."""
    return f"{CONTAINER_PREFIX}{cm_id}" + ("-modal" if inmodal else "")


async def render_learningmap(
    cm_id: int,
    fetch_content: Callable[[int], Awaitable[dict[str, Any]]],
    containers: MutableMapping[str, str],
    collaborators: Iterable[Collaborator] = (),
    inmodal: bool = False,
) -> bool:
    """
    Render a map into its container.

    Args:
        cm_id: Identifier of the map
        fetch_content: Service call returning ``{"content": markup}``
        containers: Container id -> inner markup of the page
        collaborators: Modules to initialize once the map is in place
        inmodal: Whether the map is shown inside a modal overlay

    Returns:
        True if the map was injected, False if rendering failed
    """
    target = container_id(cm_id, inmodal)
    try:
        data = await fetch_content(cm_id)
        content = data["content"]
        if target not in containers:
            raise KeyError(f"No render container '{target}'")
        containers[target] = content
    except Exception as e:
        logger.error(f"Rendering learning map {cm_id} failed: {e}")
        return False

    logger.debug(f"Injected learning map {cm_id} into {target}")
    for collaborator in collaborators:
        # Modules start independently of each other
        try:
            collaborator.init(cm_id, inmodal)
        except Exception as e:
            logger.error(f"Initializing {type(collaborator).__name__} for map {cm_id} failed: {e}")
    return True

"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Shared page documents for unit tests
- A scripted builder for transform tests
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from pagecore.ir import CoreDocument

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Configuration Constants
# =============================================================================

SAMPLE_DOCUMENT: dict[str, Any] = {
    "version": "1.0",
    "app": {
        "id": "app",
        "type": "App",
        "props": {
            "title": "Demo",
            "lang": "en",
            "state": {"open": False, "items": []},
        },
        "children": [
            {
                "id": "hero",
                "type": "Section",
                "style": {"space": "lg", "bg": "surface"},
                "children": [
                    {
                        "id": "title",
                        "type": "Heading",
                        "props": {"level": 1},
                        "text": "Welcome",
                    },
                    {
                        "id": "b1",
                        "type": "Button",
                        "props": {"variant": "primary"},
                        "text": "Toggle",
                        "events": [
                            {
                                "event": "click",
                                "do": [{"type": "toggleTarget", "target": "panel"}],
                            }
                        ],
                    },
                    {
                        "id": "panel",
                        "type": "Box",
                        "motion": {"mode": "preset", "preset": "fadeIn", "duration": 300},
                        "text": "Hidden panel",
                    },
                ],
            },
            {
                "id": "footer",
                "type": "Text",
                "style": {"typography": "caption", "color": "textSecondary"},
                "text": "Fine print",
            },
        ],
    },
}


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def sample_document_dict() -> dict[str, Any]:
    """Wire form of the sample page, safe to mutate."""
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def sample_document(sample_document_dict: dict[str, Any]) -> CoreDocument:
    """A small interactive page.

    Returns:
        Document with a hero section holding a heading, a toggle button
        (``b1``) targeting a motion panel, and a footer caption.
    """
    from pagecore.ir import load_document

    return load_document(sample_document_dict)


@pytest.fixture
def static_document() -> CoreDocument:
    """A page with no events, no motion and no initial state."""
    from pagecore.ir import CoreDocument, CoreNode

    return CoreDocument(
        app=CoreNode(
            id="app",
            type="App",
            props={"title": "Static"},
            children=[
                CoreNode(id="h", type="Heading", text="Plain"),
                CoreNode(id="p", type="Text", text="No script needed"),
            ],
        )
    )


@pytest.fixture
def scripted_complete():
    """Build a completion callable that returns canned responses in order.

    Usage:
        complete = scripted_complete('[{"op": "delete", "nodeId": "x"}]')
        builder = CompletionBuilder(complete)
    """

    def factory(*responses: str | Exception):
        queue = list(responses)
        seen = []

        async def complete(request):
            seen.append(request)
            response = queue.pop(0)
            if isinstance(response, Exception):
                raise response
            return response

        complete.requests = seen
        return complete

    return factory

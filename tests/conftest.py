"""
Pytest configuration and shared fixtures.

Fixtures here build captured-shape share pages and export files in memory so no
test touches the network.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from journey_import.main import app

Turn = Tuple[str, str]

SORTING_TURNS: List[Turn] = [
    ("user", "How do I sort an array?"),
    ("assistant", "You can use the built-in sorted function."),
    ("user", "What about reverse order?"),
    ("assistant", "Pass reverse=True to sorted."),
]

MIN_TURBO_PAYLOAD = 50


def _js_string_body(text: str) -> str:
    """Escape text the way it appears between the quotes of a JS string literal."""
    return json.dumps(text)[1:-1]


def _turbo_payload(turns: Sequence[Turn], title: str, ordered: bool) -> List[Any]:
    payload: List[Any] = ["title", title]

    def add(value: Any) -> int:
        payload.append(value)
        return len(payload) - 1

    key_message = add("message")
    key_author = add("author")
    key_role = add("role")
    key_content = add("content")
    key_parts = add("parts")

    node_refs: List[int] = []
    for role, text in turns:
        author_pos = add({f"_{key_role}": add(role)})
        parts_pos = add([add(text)])
        content_pos = add({f"_{key_parts}": parts_pos})
        message_pos = add({f"_{key_author}": author_pos, f"_{key_content}": content_pos})
        node_refs.append(add({f"_{key_message}": message_pos}))

    if ordered:
        payload.extend(["linear_conversation", node_refs])
    else:
        payload.extend(["mapping", {f"node-{i}": ref for i, ref in enumerate(node_refs)}])

    while len(payload) < MIN_TURBO_PAYLOAD:
        payload.append(None)
    return payload


@pytest.fixture
def build_turbo_page() -> Callable[..., str]:
    def _build(
        turns: Sequence[Turn] = SORTING_TURNS,
        title: str = "Sorting arrays",
        page_title: str = "Sorting arrays - ChatGPT",
        ordered: bool = True,
        chunks: int = 1,
    ) -> str:
        encoded = json.dumps(_turbo_payload(turns, title, ordered))
        size = -(-len(encoded) // chunks)
        scripts = "".join(
            "<script>window.__reactRouterContext.streamController.enqueue("
            f'"{_js_string_body(encoded[i:i + size])}");</script>'
            for i in range(0, len(encoded), size)
        )
        return (
            f"<html><head><title>{page_title}</title></head>"
            f"<body><div id=\"root\"></div>{scripts}</body></html>"
        )

    return _build


@pytest.fixture
def build_rsc_page() -> Callable[..., str]:
    """Build a Claude page whose stream text is split across RSC push chunks."""

    def _build(stream: str, page_title: str = "Closures | Claude", chunks: int = 3) -> str:
        size = -(-len(stream) // chunks)
        scripts = "".join(
            f'<script>self.__next_f.push([1,"{_js_string_body(stream[i:i + size])}"])</script>'
            for i in range(0, len(stream), size)
        )
        return f"<html><head><title>{page_title}</title></head><body>{scripts}</body></html>"

    return _build


def export_node(
    node_id: str, role: Optional[str], text: str, parent: Optional[str], children: List[str]
) -> Dict[str, Any]:
    message = None
    if role is not None:
        message = {
            "id": f"msg-{node_id}",
            "author": {"role": role},
            "content": {"content_type": "text", "parts": [text]},
        }
    return {"id": node_id, "message": message, "parent": parent, "children": children}


@pytest.fixture
def branched_export() -> Dict[str, Any]:
    """A conversation whose first answer was regenerated; current_node follows the second branch."""
    return {
        "title": "Regenerated answer",
        "current_node": "a2",
        "mapping": {
            "root": export_node("root", None, "", None, ["sys"]),
            "sys": export_node("sys", "system", "You are helpful.", "root", ["u1"]),
            "u1": export_node("u1", "user", "Name a prime number.", "sys", ["a1", "a2"]),
            "a1": export_node("a1", "assistant", "Four.", "u1", []),
            "a2": export_node("a2", "assistant", "Seven is prime.", "u1", []),
        },
    }


@pytest.fixture
def linear_export() -> Dict[str, Any]:
    return {
        "title": "Sorting lists",
        "mapping": {
            "u1": export_node("u1", "user", "How do I sort a list?", None, ["a1"]),
            "a1": export_node("a1", "assistant", "Use sorted(items).", "u1", ["u2"]),
            "u2": export_node("u2", "user", "And descending?", "a1", ["a2"]),
            "a2": export_node("a2", "assistant", "Add reverse=True.", "u2", []),
        },
    }


@pytest.fixture
def app_client() -> TestClient:
    return TestClient(app)

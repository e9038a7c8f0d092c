"""Shared test fixtures."""

import copy
from typing import Any

import pytest

from figma_cli.models.node import Node
from tests.unit.fakes import FakeApi

FILE_KEY = "AbCdEf123456"

RED = {"r": 1, "g": 0, "b": 0, "a": 1}
BLUE = {"r": 0, "g": 0, "b": 1, "a": 1}

# Document > Page A > Frame > Title, plus a Components page.
SAMPLE_DOCUMENT: dict[str, Any] = {
    "id": "0:0",
    "name": "Document",
    "type": "DOCUMENT",
    "children": [
        {
            "id": "1:1",
            "name": "Page A",
            "type": "CANVAS",
            "children": [
                {
                    "id": "2:1",
                    "name": "Frame",
                    "type": "FRAME",
                    "absoluteBoundingBox": {"x": 0, "y": 0, "width": 100, "height": 100},
                    "fills": [{"type": "SOLID", "color": BLUE}],
                    "layoutMode": "VERTICAL",
                    "itemSpacing": 8,
                    "children": [
                        {
                            "id": "3:1",
                            "name": "Title",
                            "type": "TEXT",
                            "characters": "  Hello World  ",
                            "absoluteBoundingBox": {"x": 10, "y": 20, "width": 80, "height": 60},
                            "fills": [{"type": "SOLID", "color": RED}],
                            "styles": {"fill": "S:1", "text": "S:2"},
                            "style": {
                                "fontFamily": "Inter",
                                "fontWeight": 700,
                                "fontSize": 24,
                                "lineHeightPx": 32.0,
                                "textAlignHorizontal": "LEFT",
                            },
                        }
                    ],
                }
            ],
        },
        {
            "id": "1:2",
            "name": "Components",
            "type": "CANVAS",
            "children": [
                {
                    "id": "5:1",
                    "name": "Button",
                    "type": "COMPONENT_SET",
                    "children": [
                        {"id": "5:2", "name": "Size=Small", "type": "COMPONENT"},
                        {"id": "5:3", "name": "Size=Large", "type": "COMPONENT"},
                    ],
                },
                {
                    "id": "5:4",
                    "name": "Icon",
                    "type": "COMPONENT",
                    "children": [
                        {"id": "5:5", "name": "Label", "type": "TEXT", "characters": "Icon label"}
                    ],
                },
            ],
        },
    ],
}

SAMPLE_FILE: dict[str, Any] = {
    "name": "Design File",
    "lastModified": "2024-01-15T10:30:00Z",
    "version": "42",
    "thumbnailUrl": "https://example.com/thumb.png",
    "document": SAMPLE_DOCUMENT,
    "components": {"5:4": {"description": "An icon"}},
    "styles": {
        "S:1": {"name": "Primary", "styleType": "FILL"},
        "S:2": {"name": "Heading", "styleType": "TEXT"},
    },
}


def make_node(data: dict[str, Any]) -> Node:
    return Node.from_dict(data)


@pytest.fixture
def document_dict() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def document(document_dict: dict[str, Any]) -> Node:
    return Node.from_dict(document_dict)


@pytest.fixture
def file_payload() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_FILE)


@pytest.fixture
def fake_api(file_payload: dict[str, Any]) -> FakeApi:
    """FakeApi serving the sample file under FILE_KEY."""
    api = FakeApi()
    api.add_response(f"files/{FILE_KEY}", file_payload)
    return api

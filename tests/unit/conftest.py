"""Shared test fixtures."""

import pytest

from tests.unit.fakes import make_note
from trilium_etapi.models.note import Note


@pytest.fixture
def blog_note() -> Note:
    """A published blog post note with typical labels and an author relation."""
    return make_note(
        "note1",
        "Getting Started with Python",
        labels={
            "slug": "getting-started-python",
            "status": "published",
            "wordCount": "1000",
            "tags": "python, programming,,tutorial",
            "published": "true",
        },
        relations={"author": "author1"},
    )

from __future__ import annotations

from notedesk.logging import sanitize_arguments


def test_queries_and_contents_are_reduced_to_presence_and_length() -> None:
    metadata = sanitize_arguments(
        {"query": "salary review", "content": "private note", "link": "draft"}
    )

    assert metadata == {
        "content_length": len("private note"),
        "content_present": True,
        "link_length": 5,
        "link_present": True,
        "query_length": len("salary review"),
        "query_present": True,
    }


def test_paths_and_counters_are_kept() -> None:
    metadata = sanitize_arguments(
        {"path": "/home/user/draft.md", "directory": "/home/user", "generation": 4, "count": 2}
    )

    assert metadata == {
        "count": 2,
        "directory": "/home/user",
        "generation": 4,
        "path": "/home/user/draft.md",
    }


def test_unknown_values_are_summarised() -> None:
    metadata = sanitize_arguments({"note": "token=abc", "rows": [1, 2], "extra": {"b": 1, "a": 2}})

    assert metadata == {
        "extra_keys": ["a", "b"],
        "extra_type": "dict",
        "note_length": len("token=abc"),
        "note_present": True,
        "rows_length": 2,
        "rows_type": "list",
    }

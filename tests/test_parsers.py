from logos_notes.models import UNKNOWN
from logos_notes.parsers import deduplicate, group_by_resource, process_notes


def run(text: str) -> str:
    return f'<Paragraph><Run Text="{text}"/></Paragraph>'


def make_raw_note(note_id: str, **kwargs) -> dict:
    note = {
        "id": note_id,
        "revision": "1",
        "created": "2024-01-01T10:00:00Z",
        "modified": "2024-01-01T10:00:00Z",
        "noteKind": "highlight",
        "isTrashed": False,
        "isDeleted": False,
        "role": "owner",
        "anchors": [
            {
                "textRange": {
                    "resourceId": "LLS:ESV",
                    "resourceTitle": "ESV",
                    "resourceFullTitle": "English Standard Version",
                    "reference": {"display": "Genesis 1:1", "raw": "bible.1.1.1"},
                    "offset": 120,
                    "length": 16,
                },
                "previewRichText": run("In the beginning"),
            }
        ],
        "style": {"color": "yellow", "indicator": "", "highlight": "", "markupStyle": ""},
    }
    note.update(kwargs)
    return note


def test_process_notes_flattens_anchor_fields():
    (note,) = process_notes([make_raw_note("n1")])

    assert note.id == "n1"
    assert note.kind == "highlight"
    assert note.text == "In the beginning"
    assert note.reference == "Genesis 1:1"
    assert note.reference_raw == "bible.1.1.1"
    assert note.resource_id == "LLS:ESV"
    assert note.resource_title == "English Standard Version"
    assert note.color == "yellow"
    assert note.offset == 120


def test_process_notes_collapses_duplicate_ids():
    raw = [make_raw_note("a"), make_raw_note("b"), make_raw_note("a"), make_raw_note("c"), make_raw_note("b")]

    notes = process_notes(raw)

    assert len(notes) == 3
    assert sorted(note.id for note in notes) == ["a", "b", "c"]


def test_deduplicate_keeps_last_record_in_first_seen_position():
    first = make_raw_note("a", revision="1")
    last = make_raw_note("a", revision="2")

    unique = deduplicate([first, make_raw_note("b"), last])

    assert list(unique) == ["a", "b"]
    assert unique["a"]["revision"] == "2"


def test_content_text_overrides_preview():
    note = make_raw_note("n1", content=run("My own words"))

    (processed,) = process_notes([note])

    assert processed.text == "My own words"


def test_empty_content_falls_back_to_preview():
    note = make_raw_note("n1", content="<Paragraph/>")

    (processed,) = process_notes([note])

    assert processed.text == "In the beginning"


def test_title_falls_back_to_short_title():
    note = make_raw_note("n1")
    del note["anchors"][0]["textRange"]["resourceFullTitle"]

    (processed,) = process_notes([note])

    assert processed.resource_title == "ESV"


def test_malformed_note_degrades_instead_of_dropping():
    notes = process_notes(
        [
            {"id": "bare", "noteKind": "note"},
            {"id": "odd", "anchors": "not-a-list", "style": None, "content": 17},
        ]
    )

    assert [note.id for note in notes] == ["bare", "odd"]
    for note in notes:
        assert note.text == ""
        assert note.resource_id == UNKNOWN
        assert note.resource_title == UNKNOWN
        assert note.color is None
        assert note.offset is None
        assert note.reference is None


def test_group_by_resource_preserves_first_seen_order():
    esv = make_raw_note("1")
    other = make_raw_note("2")
    other["anchors"][0]["textRange"]["resourceId"] = "LLS:NASB"
    esv_again = make_raw_note("3")

    grouped = group_by_resource(process_notes([esv, other, esv_again]))

    assert list(grouped) == ["LLS:ESV", "LLS:NASB"]
    assert [note.id for note in grouped["LLS:ESV"]] == ["1", "3"]

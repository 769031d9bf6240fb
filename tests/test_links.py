from logos_notes.links import create_logos_link, search_query


def test_link_without_search_opens_resource():
    assert create_logos_link("LLS:1234") == "logosres:1234"


def test_link_keeps_ids_without_prefix():
    assert create_logos_link("ESV") == "logosres:ESV"


def test_link_for_unknown_or_missing_resource_is_empty():
    assert create_logos_link("Unknown") == ""
    assert create_logos_link("") == ""
    assert create_logos_link(None, "text") == ""


def test_search_link_quotes_and_escapes_query():
    link = create_logos_link("LLS:1.0.71", "In the beginning")

    assert link == (
        "logos4:Search;kind=BasicSearch;q=%22In%20the%20beginning%22;syntax=v2;"
        "in=raw:Single$7CResourceId$3DLLS:1.0.71"
    )


def test_search_query_backs_up_to_word_boundary():
    text = "The quick brown fox jumps over the lazy dog and keeps running far away"

    assert search_query(text) == "The quick brown fox jumps over the lazy dog and"


def test_search_query_keeps_cut_when_boundary_is_too_early():
    text = "Abc " + "x" * 60

    assert search_query(text) == ("Abc " + "x" * 60)[:50]


def test_search_query_keeps_short_text():
    assert search_query("  grace  ") == "grace"

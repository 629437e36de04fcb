from address_search.nlp.normalizer import (
    contains_german_chars,
    denormalize,
    normalize,
    normalize_for_search,
)


def test_normalize_folds_german_chars():
    assert normalize("Straße") == "strasse"
    assert normalize("Müller") == "mueller"
    assert normalize("KÖLN") == "koeln"
    assert normalize("Gärtnerplatz") == "gaertnerplatz"


def test_normalize_passes_through_empty():
    assert normalize("") == ""
    assert normalize(None) is None


def test_denormalize_street_suffixes():
    assert denormalize("strasse") == "straße"
    assert denormalize("Uhlandstrase 5") == "uhlandstraße 5"
    assert denormalize("Hauptstrasse 12") == "hauptstraße 12"
    assert denormalize("Judengasse") == "judengaße"


def test_denormalize_sharp_s_positions():
    # Between letters
    assert denormalize("Kloss") == "kloß"
    # Start of string
    assert denormalize("ssa") == "ßa"
    # Digits do not count as flanking letters
    assert denormalize("1ss2") == "1ss2"


def test_denormalize_umlauts():
    assert denormalize("Muellerstr") == "müllerstr"
    assert denormalize("Koeln") == "köln"
    assert denormalize("Baeckerweg") == "bäckerweg"


def test_denormalize_is_lossy():
    # Ordinary spellings get "repaired" too; this is expected.
    assert denormalize("Michael") == "michäl"
    assert denormalize(normalize("Gäßchen")) != "Gäßchen"
    assert denormalize(normalize("Masse")) == "maße"


def test_denormalize_passes_through_empty():
    assert denormalize("") == ""
    assert denormalize(None) is None


def test_normalize_for_search_trims():
    assert normalize_for_search("  Straße ") == "strasse"
    assert normalize_for_search(None) == ""


def test_contains_german_chars():
    assert contains_german_chars("Müllerstr")
    assert contains_german_chars("ÄUSSERE")
    assert contains_german_chars("Fuß")
    assert not contains_german_chars("Muellerstr")
    assert not contains_german_chars("")


def test_denormalize_end_anchor_ignores_trailing_newline():
    assert denormalize("kloss\n") == "kloss\n"
    assert denormalize("kloss") == "kloß"

from fuzzyfind.item import MIN_ITEM, Item


def test_as_string_with_original_text():
    orig = "\x1b[34mfoo"
    text = "\x1b[34mbar"
    item = Item(text=text, orig_text=orig)
    assert item.as_string(True) == "foo"
    assert item.as_string(False) == orig
    assert item.as_string(True) == "foo"


def test_as_string_without_original_text():
    text = "\x1b[34mbar"
    item = Item(text=text)
    assert item.as_string(True) == text
    assert item.as_string(False) == text


def test_colors_default_to_empty():
    assert Item(text="x").colors == []


def test_min_item_sorts_before_any_index():
    assert MIN_ITEM.index < Item(text="a", index=0).index
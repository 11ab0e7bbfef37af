from __future__ import annotations

import re

from materialize.naming import MAX_KEY_LENGTH, compute_file_key, escape_component


def test_key_is_lowercase_and_keeps_extension() -> None:
    assert compute_file_key("912059917106548746", "Box_Replacement.Litematic") == (
        "912059917106548746-box_replacement.litematic"
    )


def test_forced_extension_replaces_original() -> None:
    assert compute_file_key("42", "Screenshot.JPG", "png") == "42-screenshot.png"
    assert compute_file_key("42", "no-extension", "PNG") == "42-no-extension.png"


def test_key_has_no_separators_or_nul() -> None:
    key = compute_file_key("7", 'evil/../..\\name\x00<>:"|?*.zip')
    assert "/" not in key
    assert "\\" not in key
    assert "\x00" not in key
    for reserved in '<>:"|?*':
        assert reserved not in key
    assert key.endswith(".zip")
    assert key == key.lower()


def test_key_is_deterministic() -> None:
    assert compute_file_key("1", "a b.txt") == compute_file_key("1", "a b.txt")


def test_distinct_inputs_give_distinct_keys() -> None:
    pairs = [
        ("1", "a.zip"),
        ("2", "a.zip"),
        ("1", "a.zi"),
        ("1", "a/zip"),
        ("1", "a_zip"),
        ("1", "a%2fzip"),
        ("1", "a."),
        ("1", "a"),
        ("1", "a..zip"),
        ("1-a", "zip"),
        ("1-a", "b.zip"),
        ("1", "a-b.zip"),
    ]
    keys = [compute_file_key(record_id, name) for record_id, name in pairs]
    assert len(set(keys)) == len(keys)


def test_empty_name_gives_bare_id() -> None:
    assert compute_file_key("99", "") == "99-"


def test_escape_component_encodes_trailing_dots() -> None:
    assert escape_component("name..") == "name%2e%2e"
    assert escape_component("") == ""


def test_dash_in_id_cannot_collide_with_dash_in_name() -> None:
    assert compute_file_key("1-a", "b.zip") == "1%2da-b.zip"
    assert compute_file_key("1", "a-b.zip") == "1-a-b.zip"


def test_long_non_ascii_name_stays_within_name_limit() -> None:
    name = "生存服刷怪塔结构设计图" * 3 + ".litematic"
    key = compute_file_key("912059917106548746", name)

    assert len(key.encode("utf-8")) <= MAX_KEY_LENGTH
    assert key.startswith("912059917106548746-%e7%94%9f")
    assert key.endswith(".litematic")
    assert key == compute_file_key("912059917106548746", name)
    assert key != compute_file_key("912059917106548746", "生存服刷怪塔结构设计图" * 4 + ".litematic")


def test_truncated_key_never_splits_an_escape() -> None:
    for repeat in range(33, 60):
        key = compute_file_key("7", "\u00e9" * repeat + "x.png", "png")
        head, _, digest = key[: -len(".png")].rpartition("-")
        assert len(key) <= MAX_KEY_LENGTH
        assert re.fullmatch(r"[0-9a-f]{16}", digest)
        assert re.fullmatch(r"7-(%[0-9a-f]{2})*", head)


def test_overlong_extension_is_folded_into_digest() -> None:
    key = compute_file_key("5", "archive." + "z" * 300)

    assert len(key) <= MAX_KEY_LENGTH
    assert "." not in key

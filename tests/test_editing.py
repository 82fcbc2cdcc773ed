"""Tests for caret editing helpers."""

from marginalia.core.model import EditResult
from marginalia.markdown.editing import (
    delete_at,
    handle_enter,
    insert_text,
    line_and_column,
    move_cursor_down,
    move_cursor_up,
    position_from_line_column,
)


def test_line_and_column():
    assert line_and_column("ab\ncd", 0) == (0, 0)
    assert line_and_column("ab\ncd", 4) == (1, 1)


def test_position_from_line_column_clamps_column():
    assert position_from_line_column("ab\ncd", 1, 1) == 4
    assert position_from_line_column("ab\ncdef", 0, 10) == 2


def test_move_cursor_up_and_down():
    assert move_cursor_up("abcd\nxy", 6) == 1
    assert move_cursor_up("abcd\nxy", 2) == 0
    assert move_cursor_down("xy\nabcd", 2) == 5
    assert move_cursor_down("xy\nabcd", 5) == 7


def test_insert_text():
    assert insert_text("ac", 1, "b") == EditResult("abc", 2)


def test_backspace():
    assert delete_at("abc", 2) == EditResult("ac", 1)
    assert delete_at("abc", 0) == EditResult("abc", 0)


def test_forward_delete():
    assert delete_at("abc", 0, forward=True) == EditResult("bc", 0)
    assert delete_at("abc", 3, forward=True) == EditResult("abc", 3)


def test_backspace_removes_list_marker():
    assert delete_at("x\n- ", 4) == EditResult("x\n", 2)
    assert delete_at("12. ", 4) == EditResult("", 0)


def test_enter_continues_bullet_list():
    assert handle_enter("- item", 6) == EditResult("- item\n- ", 9)
    assert handle_enter("* item", 6) == EditResult("* item\n* ", 9)


def test_enter_continues_ordered_list():
    assert handle_enter("1. first", 8) == EditResult("1. first\n2. ", 12)


def test_enter_on_empty_item_ends_list():
    assert handle_enter("- a\n- ", 6) == EditResult("- a\n\n", 5)


def test_enter_on_lone_empty_item():
    assert handle_enter("- ", 2) == EditResult("", 0)


def test_enter_in_heading_adds_blank_line():
    assert handle_enter("# T", 3) == EditResult("# T\n\n", 5)


def test_enter_in_plain_text():
    assert handle_enter("abc", 1) == EditResult("a\nbc", 2)

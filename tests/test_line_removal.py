from __future__ import annotations

from bizcard_pptx.line_removal import should_remove
from bizcard_pptx.models import Record
from bizcard_pptx.placeholder_resolver import FormattingPolicy


def test_empty_mobile_removes_mobile_line() -> None:
    assert should_remove("M. {mobile}", Record(name="A"))
    assert should_remove("Mobile: {mobile}", Record(name="A", mobile="-"))


def test_present_mobile_keeps_line() -> None:
    assert not should_remove("M. {mobile}", Record(name="A", mobile="010-1111-2222"))


def test_empty_extension_removes_labelled_line() -> None:
    assert should_remove("T. +82 {extension}", Record(name="A", extension="0"))
    assert should_remove("Ext. 99", Record(name="A"))


def test_empty_fax_removes_line_by_label_only() -> None:
    assert should_remove("Fax 02-000-0000", Record(name="A"))
    assert not should_remove("F. {fax}", Record(name="A", fax="02-000-0000"))


def test_unrelated_line_is_kept() -> None:
    assert not should_remove("Email: {email}", Record(name="A"))


def test_labels_come_from_policy() -> None:
    policy = FormattingPolicy(removal_labels={"mobile": ("Handy",), "extension": (), "fax": ()})
    assert should_remove("Handy 123", Record(name="A"), policy)
    assert not should_remove("M. 123", Record(name="A"), policy)

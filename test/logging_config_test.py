import logging
from sillywalk.logging_config import configure_logging, sanitize_for_logging


def test_line_breaks_and_tabs_become_underscores():
    assert sanitize_for_logging("John\r\nFAKE ENTRY\tok") == "John__FAKE ENTRY_ok"


def test_other_control_chars_become_question_marks():
    assert sanitize_for_logging("walk\x00\x1bhop") == "walk??hop"


def test_truncates_and_handles_none():
    assert sanitize_for_logging("x" * 80) == "x" * 50
    assert sanitize_for_logging("x" * 80, 100) == "x" * 80
    assert sanitize_for_logging(None) == "null"


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    configure_logging("debug")
    configure_logging("INFO")
    ours = [h for h in root.handlers if getattr(h, "_sillywalk", False)]
    assert len(ours) == 1
    assert root.level == logging.INFO

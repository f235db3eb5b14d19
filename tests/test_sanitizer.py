"""Tests for the input sanitizer."""

import logging

import pytest

from food_ordering.security.sanitizer import (
    FieldSpec,
    Sanitizer,
    catalog_sanitizer,
    registration_sanitizer,
    sanitize_text,
)


class TestSanitizeText:
    @pytest.mark.parametrize("raw,expected", [
        ("<script>alert('xss')</script>Hello", "Hello"),
        ("<SCRIPT type='text/javascript'>\nsteal()\n</SCRIPT>ok", "ok"),
        ("javascript:alert(1)", "alert(1)"),
        ("<img src=x onerror=alert(1)>", "<img src=x alert(1)>"),
        ("Robert'); DROP TABLE users", "Robert')  users"),
        ("  padded  ", "padded"),
        ("plain text", "plain text"),
    ])
    def test_strips_dangerous_substrings(self, raw, expected):
        assert sanitize_text(raw) == expected

    def test_spliced_payload_is_removed(self):
        assert sanitize_text("javajavascript:script:alert(1)") == "alert(1)"

    @pytest.mark.parametrize("raw", [
        "<scr<script></script>ipt>x</script>",
        "javajavascript:script:",
        "o;nclick=;",
        " ; ; DROP  TABLE ; ",
    ])
    def test_idempotent(self, raw):
        once = sanitize_text(raw)
        assert sanitize_text(once) == once


class TestSanitizer:
    def test_password_is_left_untouched(self):
        record = {"username": " john_doe ", "password": " p;ss<script>x</script> "}
        cleaned = registration_sanitizer.sanitize(record)
        assert cleaned["username"] == "john_doe"
        assert cleaned["password"] == " p;ss<script>x</script> "

    def test_unknown_fields_are_dropped(self):
        cleaned = registration_sanitizer.sanitize({"username": "john", "isAdmin": True})
        assert cleaned == {"username": "john"}

    def test_dropped_fields_are_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="food_ordering.security.sanitizer"):
            registration_sanitizer.sanitize({"username": "john", "role": "admin"})
        assert any(
            r.levelno == logging.WARNING and "role" in r.getMessage() for r in caplog.records
        )

    def test_non_string_values_pass_through(self):
        cleaned = catalog_sanitizer.sanitize({"price": 12.5, "available": False, "name": "Soup;"})
        assert cleaned == {"price": 12.5, "available": False, "name": "Soup"}

    def test_absent_fields_stay_absent(self):
        sanitizer = Sanitizer([FieldSpec("a"), FieldSpec("b")])
        assert sanitizer.sanitize({"a": "x"}) == {"a": "x"}

    def test_input_is_not_mutated(self):
        record = {"name": "<script>x</script>Soup"}
        catalog_sanitizer.sanitize(record)
        assert record == {"name": "<script>x</script>Soup"}

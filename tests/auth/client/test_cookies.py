"""Tests for the in-memory cookie jar.

Covers tolerant header parsing, expiry handling and header rendering.
"""

import pytest

from authflow.auth.models.errors import CookieError
from authflow.auth.primitives.cookies import CookieJar


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestHeaderParsing:
    def test_parses_multiple_cookies_with_trailing_separator(self):
        # Act
        jar = CookieJar.from_header("lastState=12345:some-value; app.idt=abc123;")

        # Assert
        assert jar.get("lastState") == "12345:some-value"
        assert jar.get("app.idt") == "abc123"
        assert jar.get("missing") is None

    def test_keeps_json_values_intact(self):
        jar = CookieJar.from_header('user={"name": "trent anderson"}')

        assert jar.get("user") == '{"name": "trent anderson"}'

    def test_percent_encoded_values_are_decoded(self):
        jar = CookieJar.from_header("user=%7B%22a%22%3A1%7D")

        assert jar.get("user") == '{"a":1}'

    @pytest.mark.parametrize(
        "header",
        [
            "app.idt=abc; garbage",
            "=value",
            "app.idt=abc; =oops",
        ],
    )
    def test_malformed_header_yields_empty_jar(self, header):
        # Act
        jar = CookieJar.from_header(header)

        # Assert - nothing raised and every name reads as absent
        assert jar.get("app.idt") is None
        assert jar.names() == []

    def test_empty_header(self):
        assert CookieJar.from_header("").names() == []
        assert CookieJar.from_header(None).names() == []

    def test_first_occurrence_wins(self):
        jar = CookieJar.from_header("a=1; a=2")

        assert jar.get("a") == "1"


class TestCookieWrites:
    def test_set_get_remove(self):
        # Arrange
        jar = CookieJar()

        # Act
        jar.set("lastState", "verifier:state")

        # Assert
        assert jar.get("lastState") == "verifier:state"
        assert "lastState" in jar

        jar.remove("lastState")
        assert jar.get("lastState") is None
        assert "lastState" not in jar

    def test_remove_missing_is_noop(self):
        CookieJar().remove("nothing")

    def test_expired_cookie_reads_absent(self):
        # Arrange
        clock = FakeClock()
        jar = CookieJar(clock=clock)
        jar.set("short", "lived", expires_in=10)

        # Act & Assert
        assert jar.get("short") == "lived"
        clock.now += 10
        assert jar.get("short") is None

    def test_session_cookie_never_expires(self):
        clock = FakeClock()
        jar = CookieJar(clock=clock)
        jar.set("session", "value")

        clock.now += 10**9

        assert jar.get("session") == "value"

    @pytest.mark.parametrize("name", ["", "bad name", "a;b", "a=b"])
    def test_invalid_names_raise(self, name):
        with pytest.raises(CookieError):
            CookieJar().set(name, "value")

    def test_non_string_value_raises(self):
        with pytest.raises(CookieError):
            CookieJar().set("user", {"name": "x"})

    def test_to_header_renders_live_cookies(self):
        # Arrange
        clock = FakeClock()
        jar = CookieJar(clock=clock)
        jar.set("app.idt", "abc123")
        jar.set("user", '{"a": 1}')
        jar.set("gone", "x", expires_in=1)
        clock.now += 5

        # Act
        header = jar.to_header()

        # Assert
        assert header == "app.idt=abc123; user=%7B%22a%22%3A%201%7D"
        assert CookieJar.from_header(header).get("user") == '{"a": 1}'

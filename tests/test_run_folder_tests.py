from types import SimpleNamespace

import pytest

import run_folder_tests


class FakeSession:
    def __init__(self, status_code, body):
        self.response = SimpleNamespace(
            ok=200 <= status_code < 300,
            status_code=status_code,
            json=lambda: body,
        )
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        return self.response


def test_posts_are_not_retried_on_gateway_errors():
    session = run_folder_tests.session_with_retries()
    retry = session.get_adapter("http://localhost:8000").max_retries
    assert retry.is_retry("GET", 502)
    assert not retry.is_retry("POST", 502)


def test_post_json_surfaces_envelope_error():
    session = FakeSession(502, {"success": False, "error": "Gemini API returned an empty summary."})
    with pytest.raises(RuntimeError, match="Gemini API returned an empty summary."):
        run_folder_tests.post_json(session, "http://x/api/summarize", {"content": "doc"})
    assert len(session.posts) == 1


def test_post_json_returns_data():
    session = FakeSession(200, {"success": True, "data": {"html": "<p>x</p>"}})
    assert run_folder_tests.post_json(session, "http://x/api/render", {"content": "x"}) == {"html": "<p>x</p>"}


def test_count_markup():
    html = '<div class="math-display">a</div><span class="math-frac"></span>\\foo'
    counts = run_folder_tests.count_markup(html)
    assert counts["display_math"] == 1
    assert counts["fractions"] == 1
    assert counts["inline_math"] == 0
    assert counts["leftover_commands"] == 1

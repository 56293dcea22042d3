import pytest

from jerp.ui import theme
from jerp.ui.theme import resolve_theme


@pytest.mark.parametrize(
    "preference, system_theme, expected",
    [
        ("light", "dark", "light"),
        ("dark", "light", "dark"),
        ("system", "dark", "dark"),
        ("system", "light", "light"),
        ("system", None, "light"),
        ("system", "sepia", "light"),
    ],
)
def test_resolve_theme(preference, system_theme, expected):
    assert resolve_theme(preference, system_theme) == expected


@pytest.fixture
def rendered_css(monkeypatch):
    calls = []
    monkeypatch.setattr(theme.st, "markdown", lambda body, **kwargs: calls.append(body))
    return calls


def test_system_theme_follows_browser(monkeypatch, rendered_css):
    monkeypatch.setattr(theme, "_browser_theme", lambda: "dark")
    theme.apply_theme("system")
    assert len(rendered_css) == 1
    assert "#111827" in rendered_css[0]


def test_system_theme_without_browser_hint_draws_nothing(monkeypatch, rendered_css):
    monkeypatch.setattr(theme, "_browser_theme", lambda: None)
    theme.apply_theme("system")
    assert rendered_css == []


def test_explicit_theme_ignores_browser(monkeypatch, rendered_css):
    monkeypatch.setattr(theme, "_browser_theme", lambda: "dark")
    theme.apply_theme("light")
    assert "#ffffff" in rendered_css[0]

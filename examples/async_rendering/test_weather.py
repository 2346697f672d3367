"""Tests for the async block helper example."""


class TestAsyncRenderingApp:
    """Verify async block helpers render their fetched data."""

    def test_headline(self, example_app) -> None:
        assert example_app.headline_output == "Darmstadt: 15.99°C"

    def test_each_city_rendered(self, example_app) -> None:
        assert "Darmstadt: 15.99°C, cloudy (tomorrow: rain)" in example_app.output
        assert "Lisbon: 22.5°C, clear (tomorrow: sun)" in example_app.output

    def test_no_placeholders_leak(self, example_app) -> None:
        assert "\u0001" not in example_app.output

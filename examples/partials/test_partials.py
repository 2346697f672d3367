"""Tests for the partials example."""


class TestPartialsApp:
    """Verify partials resolve their async helpers with the caller."""

    def test_nested_partials(self, example_app) -> None:
        assert '<li><img src="/avatars/1.png"> Ada (admin)</li>' in example_app.output
        assert '<li><img src="/avatars/2.png"> Grace (editor)</li>' in example_app.output

    def test_data_is_escaped(self, example_app) -> None:
        assert "Barbara (&lt;guest&gt;)" in example_app.output

    def test_per_call_partial(self, example_app) -> None:
        assert example_app.output.endswith("</ul><p>3 members</p>")
        assert "footer" not in example_app.env.partials

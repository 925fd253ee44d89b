"""Tests for text helper functions."""


class TestCountWords:
    def test_basic(self):
        from tools.text_utils import count_words
        assert count_words("olive oil is  liquid gold\n") == 5

    def test_empty(self):
        from tools.text_utils import count_words
        assert count_words("") == 0


class TestMarkers:
    def test_error_marker(self):
        from tools.text_utils import error_marker, is_error_marker
        marker = error_marker("quota exceeded")
        assert marker == "// ERROR: quota exceeded"
        assert is_error_marker(marker)
        assert not is_error_marker("Regular content")

    def test_translation_error_marker_keeps_original(self):
        from tools.text_utils import translation_error_marker
        assert translation_error_marker("Ciao") == "[Translation Error] Ciao"


class TestJoinKeywords:
    def test_skips_blank(self):
        from tools.text_utils import join_keywords
        assert join_keywords(["olive", " ", "", " oil "]) == "olive, oil"

import pytest

from generator.parsing import parse_llm_json, parse_llm_model, unwrap_code_fence
from shared.errors import ParseError
from shared.models import SelectedCV

PAYLOAD = '{"skills": {"technical": ["Python", "SQL"]}, "experiences": []}'


class TestCodeFence:
    """Optional markdown fence around model output"""

    @pytest.mark.parametrize(
        "raw",
        [
            f"```json\n{PAYLOAD}\n```",
            f"```\n{PAYLOAD}\n```",
            PAYLOAD,
            f"  \n```JSON\n{PAYLOAD}\n```\n",
            f"```json {PAYLOAD} ```",
        ],
    )
    def test_all_forms_parse_equal(self, raw):
        assert parse_llm_json(raw) == parse_llm_json(PAYLOAD)

    def test_unwrap_without_fence_returns_trimmed_text(self):
        assert unwrap_code_fence("  [1, 2]  ") == "[1, 2]"

    def test_unterminated_fence_is_not_unwrapped(self):
        with pytest.raises(ParseError):
            parse_llm_json(f"```json\n{PAYLOAD}")


class TestParseErrors:
    def test_invalid_json(self):
        with pytest.raises(ParseError) as exc_info:
            parse_llm_json("Sure! Here is your CV: {oops}")
        assert exc_info.value.raw.startswith("Sure!")

    def test_empty_output(self):
        with pytest.raises(ParseError):
            parse_llm_json("```json\n```")

    def test_wrong_shape(self):
        with pytest.raises(ParseError):
            parse_llm_model('{"experiences": "none"}', SelectedCV)

    def test_valid_model(self):
        selected = parse_llm_model(PAYLOAD, SelectedCV)
        assert selected.skills.technical == ["Python", "SQL"]

import pytest

from wizards.model_props import DEFAULT_MODEL_TABLE, _load_model_table, get_model_props, is_openai_model


def test_every_purpose_has_a_model():
    for purpose in DEFAULT_MODEL_TABLE:
        assert get_model_props(purpose).model_name


def test_unknown_purpose():
    with pytest.raises(ValueError):
        get_model_props("poetry")


def test_provider_detection():
    assert is_openai_model("gpt-4o-mini")
    assert is_openai_model("o3-mini")
    assert not is_openai_model("gemini-2.5-flash")


def test_override_file_with_comments(tmp_path):
    path = tmp_path / "models.json"
    path.write_text(
        '{\n'
        '  // cheaper model for the chat\n'
        '  "assistant": {"model": "gemini-2.5-flash-lite", "temperature": 0.1}\n'
        '}\n',
        encoding="utf-8",
    )
    table = _load_model_table(str(path))
    assert table["assistant"] == {"model": "gemini-2.5-flash-lite", "temperature": 0.1}
    assert table["purpose"] == DEFAULT_MODEL_TABLE["purpose"]


@pytest.mark.parametrize("content", [
    '{"nope": {"model": "gpt-4o"}}',
    '{"purpose": {"temperature": 0.2}}',
    '{"purpose": {"model": "gpt-4o", "temperature": "hot"}}',
    '["purpose"]',
])
def test_bad_override_fails_fast(tmp_path, content):
    path = tmp_path / "models.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        _load_model_table(str(path))


def test_missing_override_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        _load_model_table(str(tmp_path / "missing.json"))

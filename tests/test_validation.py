import pytest
from todos.api.validation import validate_create_payload, validate_task_id, validate_update_payload
from todos.domain.errors import TaskValidationError


@pytest.mark.parametrize("raw, expected", [("1", 1), ("42", 42), ("-3", -3), (5, 5), (str(2 ** 63 - 1), 2 ** 63 - 1)])
def test_task_id_parses_integers(raw, expected):
    assert validate_task_id(raw) == expected


@pytest.mark.parametrize("raw", [
    "abc", "", "1.5", "12abc", None, True,
    " 7 ", "1_0", "+3", "\u0661\u0662",
    str(2 ** 63), "99999999999999999999999", 2 ** 63,
])
def test_task_id_rejects_non_integers(raw):
    with pytest.raises(TaskValidationError) as exc:
        validate_task_id(raw)
    assert exc.value.message == "invalid id"


def test_create_defaults_completed_to_false():
    assert validate_create_payload({"title": "buy milk"}) == {"title": "buy milk", "completed": False}


def test_create_keeps_completed():
    assert validate_create_payload({"title": "A", "completed": True}) == {"title": "A", "completed": True}


@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": None}, {"completed": True}])
def test_create_requires_title(body):
    with pytest.raises(TaskValidationError) as exc:
        validate_create_payload(body)
    assert exc.value.field == "title"
    assert exc.value.message == "title required"


@pytest.mark.parametrize("title", [1, ["A"], {"text": "A"}, True])
def test_create_rejects_non_text_title(title):
    with pytest.raises(TaskValidationError) as exc:
        validate_create_payload({"title": title})
    assert exc.value.field == "title"


@pytest.mark.parametrize("completed", ["true", 1, 0, None])
def test_completed_must_be_boolean(completed):
    with pytest.raises(TaskValidationError) as exc:
        validate_create_payload({"title": "A", "completed": completed})
    assert exc.value.field == "completed"
    with pytest.raises(TaskValidationError):
        validate_update_payload({"completed": completed})


@pytest.mark.parametrize("body", [None, [], "title", 3])
def test_body_must_be_an_object(body):
    with pytest.raises(TaskValidationError):
        validate_create_payload(body)
    with pytest.raises(TaskValidationError):
        validate_update_payload(body)


def test_update_keeps_only_present_fields():
    assert validate_update_payload({"completed": True}) == {"completed": True}
    assert validate_update_payload({"title": "B", "extra": 1}) == {"title": "B"}
    assert validate_update_payload({}) == {}


def test_update_rejects_non_text_title():
    with pytest.raises(TaskValidationError):
        validate_update_payload({"title": 5})


@pytest.mark.parametrize("title", ["   ", "\t\n"])
def test_create_rejects_blank_title(title):
    with pytest.raises(TaskValidationError) as exc:
        validate_create_payload({"title": title, "completed": True})
    assert exc.value.message == "title required"


@pytest.mark.parametrize("title", ["", "   "])
def test_update_rejects_blank_title(title):
    with pytest.raises(TaskValidationError) as exc:
        validate_update_payload({"title": title})
    assert exc.value.field == "title"

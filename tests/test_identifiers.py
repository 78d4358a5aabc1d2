import pytest

from player_world_lock.errors import UnsafeIdentifierError
from player_world_lock.identifiers import is_safe_identifier, require_safe_identifier


@pytest.mark.parametrize("value", ["", "alice", "Bob_99", "a-b-c", "0123456789", "_-_"])
def test_safe_identifiers_accepted(value):
    assert is_safe_identifier(value)


@pytest.mark.parametrize(
    "value",
    ["../etc", "a/b", "a.b", "with space", "tab\t", "new\nline", "ünïcode", "a\\b", "semi;colon"],
)
def test_unsafe_identifiers_rejected(value):
    assert not is_safe_identifier(value)


def test_non_string_is_not_safe():
    assert not is_safe_identifier(None)
    assert not is_safe_identifier(42)


def test_require_rejects_empty_and_unsafe():
    assert require_safe_identifier("home", "instance") == "home"
    with pytest.raises(UnsafeIdentifierError):
        require_safe_identifier("", "instance")
    with pytest.raises(UnsafeIdentifierError) as excinfo:
        require_safe_identifier("a.b", "instance")
    assert excinfo.value.value == "a.b"
    assert "instance" in str(excinfo.value)

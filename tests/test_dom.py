import pytest

from faucets.dom import (
    REQUEST_BUTTON_PATTERN,
    ButtonInfo,
    describe_buttons,
    find_request_button,
    has_success_signal,
    is_request_button,
    parse_buttons,
    request_button_disabled,
)


class TestRequestButtonMatching:
    """Exact, trimmed match on the visible button text."""

    @pytest.mark.parametrize("text", ["Request", "  Request  ", "\nRequest\t"])
    def test_matches_trimmed_text(self, text):
        assert is_request_button(text) is True

    @pytest.mark.parametrize("text", ["request", "REQUEST", "Request tokens", "Re quest", "", None])
    def test_rejects_other_text(self, text):
        assert is_request_button(text) is False

    @pytest.mark.parametrize("text", ["Request", "  Request  ", "\nRequest\t", "request", "Request tokens", ""])
    def test_locator_pattern_agrees_with_predicate(self, text):
        assert bool(REQUEST_BUTTON_PATTERN.search(text)) is is_request_button(text)

    def test_find_returns_first_match(self):
        buttons = [
            ButtonInfo(text="Connect", index=0),
            ButtonInfo(text=" Request ", id="first", index=1),
            ButtonInfo(text="Request", id="second", index=2),
        ]
        found = find_request_button(buttons)
        assert found is not None
        assert found.id == "first"
        assert found.index == 1

    def test_find_none(self):
        assert find_request_button([ButtonInfo(text="Submit")]) is None
        assert find_request_button([]) is None


class TestSuccessSignal:

    @pytest.mark.parametrize("text", [
        "Success", "tokens SENT to your wallet", "Received!", "PROCESSING request",
        "Your claim was successful",
    ])
    def test_markers_case_insensitive(self, text):
        assert has_success_signal(text) is True

    @pytest.mark.parametrize("text", ["", None, "Please wait", "Rate limited, try later"])
    def test_no_marker(self, text):
        assert has_success_signal(text) is False


class TestButtonSnapshot:

    def test_disabled_request_button(self):
        buttons = [ButtonInfo(text="Connect"), ButtonInfo(text="Request", disabled=True)]
        assert request_button_disabled(buttons) is True

    def test_enabled_or_missing_request_button(self):
        assert request_button_disabled([ButtonInfo(text="Request")]) is False
        assert request_button_disabled([ButtonInfo(text="Other", disabled=True)]) is False
        assert request_button_disabled([]) is False

    def test_parse_buttons_keeps_document_index(self):
        raw = [
            {"text": "Connect", "class": "nav", "id": "c", "disabled": False},
            "not a button",
            {"text": "Request", "class": None, "id": "", "disabled": True},
        ]
        buttons = parse_buttons(raw)
        assert [b.text for b in buttons] == ["Connect", "Request"]
        assert buttons[1].index == 2
        assert buttons[1].class_name == ""
        assert buttons[1].disabled is True

    def test_parse_buttons_rejects_non_list(self):
        assert parse_buttons(None) == []
        assert parse_buttons({"text": "Request"}) == []

    def test_describe_buttons(self):
        summary = describe_buttons([
            ButtonInfo(text="Request", class_name="btn", id="req", disabled=True, index=0),
        ])
        assert "text='Request'" in summary
        assert "class='btn'" in summary
        assert "id='req'" in summary
        assert "disabled" in summary
        assert describe_buttons([]) == "no buttons on page"


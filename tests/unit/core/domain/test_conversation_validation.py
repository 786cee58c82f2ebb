"""
Tests for the validation coordinator (Conversation.validate) driven across
turns through the host.

Covers the re-ask protocol: attempt counting, suggestion carry-over, the
"say yes to the suggestion" shortcut, the handover sentinel and the
handover offer extension point.
"""

import pytest

from askflow.core.domain.answer import Answer, reply_value
from askflow.core.domain.config_schema import ConversationSettings
from askflow.core.domain.conversation import Conversation
from askflow.core.domain.invalid_answer import InvalidAnswer
from askflow.core.domain.question import Question

SESSION = "chat-7"


class MagicNumber(Conversation):
    conversation_name = "tests.magic_number"

    def run(self) -> None:
        self.ask("What's the magic number?").validate("magic.check").then("magic.record")


class Handover(Conversation):
    conversation_name = "tests.handover"

    def run(self) -> None:
        self.say("Connecting you to a person")


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def magic(host, handlers, recorded):
    @handlers.handler("magic.check")
    def check(conversation, reply):
        value = reply_value(reply)
        if str(value).strip() != "21":
            return InvalidAnswer().ask("Try 21").suggest("21", 21)
        return 21

    @handlers.handler("magic.record")
    def record(conversation, number):
        recorded.append(number)
        return number

    host.register_conversation(MagicNumber)
    host.register_conversation(Handover)
    host.start_conversation(MagicNumber(), SESSION)
    return host


class TestMagicNumberExample:
    """The worked example: reject 42, suggest 21, accept yes/ok/21."""

    def test_rejection_reasks_with_suggestion(self, magic, store, transport, recorded):
        assert magic.handle_reply(SESSION, "42") is None

        pending = store.peek(SESSION)
        assert pending.attempt == 2
        assert pending.suggested == 21
        assert pending.queue == ["magic.record"]
        assert pending.validator == "magic.check"
        assert recorded == []

        prompt = transport.last(SESSION).message
        assert isinstance(prompt, Question)
        assert prompt.text == "Try 21"
        assert [(b.text, b.value) for b in prompt.buttons] == [("21", 21)]

    @pytest.mark.parametrize("reply", ["yes", "ok", "Yes please", "Y"])
    def test_affirmative_reply_accepts_suggestion(self, magic, transport, recorded, reply):
        magic.handle_reply(SESSION, "42")
        sent_before = len(transport.sent(SESSION))

        assert magic.handle_reply(SESSION, reply) == 21

        assert recorded == [21]
        assert len(transport.sent(SESSION)) == sent_before
        assert not magic.has_pending(SESSION)

    def test_valid_reply_after_reask_runs_queue(self, magic, recorded):
        magic.handle_reply(SESSION, "42")

        assert magic.handle_reply(SESSION, "21") == 21
        assert recorded == [21]

    def test_suggestion_button_press_is_accepted(self, magic, recorded):
        magic.handle_reply(SESSION, "42")

        result = magic.handle_reply(SESSION, Answer(text="21", value=21, interactive=True))

        assert result == 21
        assert recorded == [21]

    def test_valid_first_reply_skips_reask(self, magic, transport, recorded):
        assert magic.handle_reply(SESSION, " 21 ") == 21
        assert recorded == [21]
        assert [m.text for m in transport.sent(SESSION)] == ["What's the magic number?"]


class TestRepeatedRejection:
    """Attempt numbers grow by one per rejected reply."""

    def test_attempts_increase_and_suggestion_carries(self, magic, store, recorded):
        attempts = []
        for reply in ["1", "2", "3", "4"]:
            magic.handle_reply(SESSION, reply)
            pending = store.peek(SESSION)
            attempts.append((pending.attempt, pending.suggested))

        assert attempts == [(2, 21), (3, 21), (4, 21), (5, 21)]
        assert recorded == []

    def test_latest_suggestion_is_carried(self, host, handlers, store):
        @handlers.handler("echo.check")
        def check(conversation, reply):
            return InvalidAnswer().ask("Again").suggest(f"maybe {reply}", f"s-{reply}")

        class Echo(Conversation):
            conversation_name = "tests.echo"

            def run(self) -> None:
                self.ask("Say something").validate("echo.check")

        host.register_conversation(Echo)
        host.start_conversation(Echo(), SESSION)

        host.handle_reply(SESSION, "a")
        host.handle_reply(SESSION, "b")

        pending = store.peek(SESSION)
        assert (pending.attempt, pending.suggested) == (3, "s-b")

    def test_yes_without_suggestion_is_validated_normally(self, host, handlers, store):
        @handlers.handler("strict.check")
        def check(conversation, reply):
            if reply != "blue":
                return InvalidAnswer("Which colour? (blue)")
            return reply

        class Colour(Conversation):
            conversation_name = "tests.colour"

            def run(self) -> None:
                self.ask("Favourite colour?").validate("strict.check")

        host.register_conversation(Colour)
        host.start_conversation(Colour(), SESSION)

        host.handle_reply(SESSION, "red")
        assert host.handle_reply(SESSION, "yes") is None

        pending = store.peek(SESSION)
        assert pending.attempt == 3
        assert pending.suggested is None

    def test_reask_prompt_without_suggestion_is_plain_text(self, magic, handlers, host, transport):
        @handlers.handler("plain.check")
        def check(conversation, reply):
            return InvalidAnswer().ask("Nope")

        class Plain(Conversation):
            conversation_name = "tests.plain"

            def run(self) -> None:
                self.ask("Anything?").validate("plain.check")

        host.register_conversation(Plain)
        host.start_conversation(Plain(), "other")
        host.handle_reply("other", "x")

        assert transport.last("other").message == "Nope"

    def test_validator_exception_propagates(self, host, handlers):
        @handlers.handler("broken.check")
        def check(conversation, reply):
            raise ValueError("cannot parse")

        class Broken(Conversation):
            conversation_name = "tests.broken"

            def run(self) -> None:
                self.ask("Date?").validate("broken.check")

        host.register_conversation(Broken)
        host.start_conversation(Broken(), SESSION)

        with pytest.raises(ValueError, match="cannot parse"):
            host.handle_reply(SESSION, "tomorrow")


class TestHandoverSentinel:
    """The reserved handover value aborts validation."""

    def test_handover_request_never_runs_queue(self, magic, transport, recorded):
        sent_before = len(transport.sent(SESSION))

        assert magic.handle_reply(SESSION, "handover:request") is None

        assert recorded == []
        assert len(transport.sent(SESSION)) == sent_before
        assert not magic.has_pending(SESSION)

    def test_handover_request_after_reask(self, magic, recorded):
        magic.handle_reply(SESSION, "42")

        assert magic.handle_reply(SESSION, Answer(text="Talk to a person", value="handover:request")) is None
        assert recorded == []

    def test_handover_request_without_validator(self, host, handlers):
        ran = []

        @handlers.handler("free.note")
        def note(conversation, reply):
            ran.append(reply)
            return reply

        class Free(Conversation):
            conversation_name = "tests.free"

            def run(self) -> None:
                self.ask("Anything to add?").then("free.note")

        host.register_conversation(Free)
        host.start_conversation(Free(), SESSION)

        assert host.handle_reply(SESSION, "handover:request") is None
        assert ran == []


class TestHandoverConfiguration:
    """Handover threshold and target come from configuration."""

    @pytest.fixture
    def conversation_settings(self):
        return ConversationSettings(
            handover_after_attempts=1,
            handover_conversation="tests.handover",
            handover_offer_text="Want a human?",
            handover_button_text="Human please",
        )

    def test_handover_request_starts_configured_conversation(self, magic, transport):
        magic.handle_reply(SESSION, "handover:request")

        assert transport.last(SESSION).text == "Connecting you to a person"

    def test_offer_added_once_attempt_exceeds_threshold(self, magic, transport):
        magic.handle_reply(SESSION, "1")
        first = transport.last(SESSION).message
        assert [b.value for b in first.buttons] == [21]

        magic.handle_reply(SESSION, "2")
        second = transport.last(SESSION).message

        assert second.text == "Try 21\n\nWant a human?"
        assert [(b.text, b.value) for b in second.buttons] == [
            ("21", 21),
            ("Human please", "handover:request"),
        ]

    def test_offer_on_plain_prompt(self, host):
        conversation = MagicNumber().bind_host(host, SESSION)

        offer = conversation.offer_handover("Which size?")

        assert isinstance(offer, Question)
        assert offer.text == "Which size?\n\nWant a human?"
        assert [b.value for b in offer.buttons] == ["handover:request"]

    def test_offer_does_not_mutate_original_question(self, host):
        conversation = MagicNumber().bind_host(host, SESSION)
        original = Question(text="Pick")

        conversation.offer_handover(original)

        assert original.text == "Pick"
        assert original.buttons == []


class TestHandoverDefaults:
    """Without a handover conversation the offer is a no-op."""

    def test_prompt_unchanged_at_high_attempts(self, magic, transport):
        for reply in ["1", "2", "3", "4"]:
            magic.handle_reply(SESSION, reply)

        prompt = transport.last(SESSION).message
        assert prompt.text == "Try 21"
        assert len(prompt.buttons) == 1

    def test_threshold_can_be_disabled(self, host):
        host.conversation_settings.handover_after_attempts = None
        conversation = MagicNumber().bind_host(host, SESSION)

        assert conversation.should_offer_handover(50) is False

    def test_default_threshold(self, host):
        conversation = MagicNumber().bind_host(host, SESSION)

        assert conversation.should_offer_handover(2) is False
        assert conversation.should_offer_handover(3) is True


class TestConfiguredAffirmativeWords:
    """The suggestion shortcut uses the configured word list."""

    @pytest.fixture
    def conversation_settings(self):
        return ConversationSettings(affirmative_words=["oui"])

    def test_configured_word_accepts_suggestion(self, magic, recorded):
        magic.handle_reply(SESSION, "42")

        assert magic.handle_reply(SESSION, "Oui merci") == 21
        assert recorded == [21]

    def test_default_word_no_longer_accepts(self, magic, store, recorded):
        magic.handle_reply(SESSION, "42")

        assert magic.handle_reply(SESSION, "yes") is None

        assert recorded == []
        pending = store.peek(SESSION)
        assert (pending.attempt, pending.suggested) == (3, 21)


class TestValidateDirectly:
    """Conversation.validate without the host round trip."""

    def test_no_validator_accepts_reply(self, host):
        conversation = MagicNumber().bind_host(host, SESSION)

        assert conversation.validate("anything", None) == "anything"

    def test_reask_returns_new_continuation(self, magic, handlers):
        conversation = MagicNumber().bind_host(magic, SESSION)
        check = handlers.resolve("magic.check")

        result = conversation.validate("42", check, suggestion=None, attempt=3)

        assert result.attempt == 4
        assert result.suggested == 21
        assert result.conversation is conversation

    def test_suggestion_shortcut(self, magic, handlers):
        conversation = MagicNumber().bind_host(magic, SESSION)
        check = handlers.resolve("magic.check")

        assert conversation.validate("yep", check, suggestion=21, attempt=2) == 21

    def test_boolean_true_accepts_suggestion(self, magic, handlers):
        conversation = MagicNumber().bind_host(magic, SESSION)
        check = handlers.resolve("magic.check")

        assert conversation.validate(True, check, suggestion=21, attempt=2) == 21

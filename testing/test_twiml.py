"""Tests for the TwiML documents played on Twilio calls."""

from app.calling.script_cache import DEFAULT_SCRIPT
from app.telephony import twiml
from testing.sample_inputs import SAMPLE_SCRIPT


def test_script_questions_reads_numbered_lines():
    questions = twiml.script_questions(SAMPLE_SCRIPT)

    assert questions == [
        "How many years have you worked with Python?",
        "Have you run services in production?",
        "When could you start?",
    ]


def test_script_questions_accepts_parenthesis_numbering():
    assert twiml.script_questions("Intro\n1) First?\n  2) Second?") == ["First?", "Second?"]


def test_interview_greeting_gathers_one_digit():
    document = twiml.interview_greeting("Asha", action="https://calls.example.com/api/calls/response")

    assert "Hello Asha" in document
    assert "<Gather" in document
    assert 'numDigits="1"' in document
    assert 'action="https://calls.example.com/api/calls/response"' in document
    assert "Press 1 for yes, or 2 for no." in document


def test_interview_greeting_without_name():
    assert "Hello there" in twiml.interview_greeting()


def test_hold_message_redirects_when_given_url():
    document = twiml.hold_message("Sam", redirect_url="https://api.vapi.ai/call/abc/connect")

    assert "Please hold" in document
    assert "<Redirect>https://api.vapi.ai/call/abc/connect</Redirect>" in document


def test_hold_message_without_redirect():
    assert "<Redirect" not in twiml.hold_message("Sam")


def test_digit_one_asks_script_questions():
    document = twiml.digit_response("1", SAMPLE_SCRIPT)

    assert "Let's begin" in document
    assert "When could you start?" in document
    assert document.count("<Pause") == 1 + 3


def test_digit_one_falls_back_to_default_questions():
    document = twiml.digit_response("1", "Just chat with the candidate.")

    for question in twiml.script_questions(DEFAULT_SCRIPT):
        assert question in document


def test_digit_two_declines():
    assert "No problem" in twiml.digit_response("2", SAMPLE_SCRIPT)


def test_other_digits_not_understood():
    assert "didn't understand" in twiml.digit_response("7", SAMPLE_SCRIPT)
    assert "didn't understand" in twiml.digit_response(None, SAMPLE_SCRIPT)


def test_technical_error():
    assert "technical issue" in twiml.technical_error()

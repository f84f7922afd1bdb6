"""
TwiML documents for the Twilio interview flows.
"""

import re

from twilio.twiml.voice_response import Gather, VoiceResponse

from app.calling.script_cache import DEFAULT_SCRIPT

RESPONSE_ACTION = "/api/calls/response"

QUESTION_PATTERN = re.compile(r"^\s*\d+[.)]\s*(.+?)\s*$")


def script_questions(script: str) -> list[str]:
    """Numbered lines of an interview script ("1. ..."), in order."""
    questions = []
    for line in script.splitlines():
        match = QUESTION_PATTERN.match(line)
        if match:
            questions.append(match.group(1))
    return questions


def interview_greeting(
    candidate_name: str | None = None,
    action: str = RESPONSE_ACTION,
    voice: str = "alice",
) -> str:
    """Greeting that asks the candidate to press 1 (yes) or 2 (no)."""
    response = VoiceResponse()
    response.say(
        f"Hello {candidate_name or 'there'}, this is an automated call regarding your job application.",
        voice=voice,
    )
    response.pause(length=1)
    response.say("Do you have a few minutes to answer some questions?", voice=voice)

    gather = Gather(num_digits=1, action=action, method="POST", timeout=10)
    gather.say("Press 1 for yes, or 2 for no.", voice=voice)
    response.append(gather)

    response.say(
        "I didn't hear a response. Please call back when you're available. Goodbye.",
        voice=voice,
    )
    return str(response)


def hold_message(candidate_name: str | None = None, voice: str | None = None, redirect_url: str | None = None) -> str:
    """Ask the candidate to hold, optionally redirecting into a Vapi call."""
    kwargs = {"voice": voice} if voice else {}

    response = VoiceResponse()
    response.say(
        f"Hello {candidate_name or 'there'}, this is an automated call regarding your job application. "
        "Please hold while we connect you to our interview system.",
        **kwargs,
    )
    response.pause(length=2)
    response.say("Connecting you now...", **kwargs)
    if redirect_url:
        response.redirect(redirect_url)
    return str(response)


def digit_response(digits: str | None, script: str, voice: str = "alice") -> str:
    """TwiML for the Gather callback: 1 runs the interview, 2 ends politely."""
    response = VoiceResponse()

    if digits == "1":
        questions = script_questions(script) or script_questions(DEFAULT_SCRIPT)
        response.say("Great! Let's begin with a few questions.", voice=voice)
        response.pause(length=1)
        for question in questions:
            response.say(question, voice=voice)
            response.pause(length=3)
        response.say("Thank you for your time! We will be in touch soon. Goodbye.", voice=voice)
    elif digits == "2":
        response.say(
            "No problem. Please call back when you have time for the interview. Thank you and goodbye.",
            voice=voice,
        )
    else:
        response.say(
            "I didn't understand your response. Please call back when you're available. Goodbye.",
            voice=voice,
        )

    return str(response)


def technical_error(voice: str = "alice") -> str:
    response = VoiceResponse()
    response.say("Sorry, there was a technical issue. Please call back later. Goodbye.", voice=voice)
    return str(response)

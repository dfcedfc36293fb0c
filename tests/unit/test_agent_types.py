import pytest
from pydantic import ValidationError

from agents.types import AgentInput, AgentOutput, CategoryScore, Scoring, decode_image_data_uri


def test_agent_input_trims_transcript_and_reads_camel_case(png_uri):
    agent_input = AgentInput.model_validate(
        {
            "jobRole": "Backend Engineer",
            "company": "Acme",
            "resumeText": "Python, SQL\n\nFive years of APIs.",
            "language": "English",
            "conversationHistory": [{"question": "Q1", "answer": "A1"}],
            "currentTranscript": "  I built a queue.  ",
            "visualSnapshot": png_uri,
        }
    )
    assert agent_input.current_transcript == "I built a queue."
    assert agent_input.conversation_history[0].question == "Q1"


def test_agent_input_rejects_blank_transcript():
    with pytest.raises(ValidationError):
        AgentInput(job_role="r", company="c", resume_text="", language="English", current_transcript="   ")


@pytest.mark.parametrize("bad", ["not-a-uri", "data:image/png;base64,@@@@", "data:text/plain;base64,aGk="])
def test_snapshot_must_decode(bad):
    with pytest.raises(ValueError):
        decode_image_data_uri(bad)
    with pytest.raises(ValidationError):
        AgentInput(
            job_role="r", company="c", resume_text="", language="English", current_transcript="x", visual_snapshot=bad
        )


@pytest.mark.parametrize("score", [0, 11])
def test_category_score_range(score):
    with pytest.raises(ValidationError):
        CategoryScore(score=score, justification="fine")


def test_category_score_needs_justification():
    with pytest.raises(ValidationError):
        CategoryScore(score=5, justification="  ")


def test_scoring_present_keeps_category_order():
    scoring = Scoring.model_validate(
        {
            "fillerWords": {"score": 4, "justification": "Many ums."},
            "ideas": {"score": 8, "justification": "Strong."},
        }
    )
    assert list(scoring.present()) == ["ideas", "filler_words"]
    assert scoring.scores() == [8, 4]


def test_output_feedback_drops_visual_without_snapshot(reply):
    output = AgentOutput.model_validate(reply())
    assert output.feedback(with_visual=False).visual is None
    assert output.feedback(with_visual=True).visual == "Good eye contact."
    assert not output.is_end_command()


def test_bare_end_command_detected(reply):
    output = AgentOutput.model_validate(reply("Thanks, goodbye.", over=True, feedback=False))
    assert output.is_end_command()
    assert output.next_question == "Thanks, goodbye."


def test_concluding_reply_with_feedback_is_not_bare(reply):
    output = AgentOutput.model_validate(reply("That wraps it up.", over=True))
    assert output.is_interview_over
    assert not output.is_end_command()


def test_output_requires_next_question():
    with pytest.raises(ValidationError):
        AgentOutput.model_validate({"nextQuestion": "  "})


def test_end_command_with_empty_scoring_block():
    output = AgentOutput.model_validate({"nextQuestion": "Goodbye!", "isInterviewOver": True, "scoring": {}})
    assert output.is_end_command()
    assert output.feedback(with_visual=True).scoring is None


def test_end_command_ignores_visual_placeholder():
    output = AgentOutput.model_validate(
        {"nextQuestion": "Goodbye!", "isInterviewOver": True, "visualFeedback": "No video frame was provided."}
    )
    assert output.is_end_command()

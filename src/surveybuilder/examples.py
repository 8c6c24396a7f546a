"""
Example survey builder.

Builds a small customer-feedback survey through the same mutators the
editor uses: two sections, choice questions, a rating, and a follow-up
section shown only to respondents who want to be contacted.
"""
from surveybuilder.model import Locale, QuestionType, Survey, new_survey


def build_example_feedback_survey(locale: Locale = Locale.EN) -> Survey:
    survey = new_survey(locale)
    survey.update_survey(
        title="Customer Feedback",
        description="Tell us how we did.",
    )

    about = survey.sections[0]
    survey.update_section(about.id, name="about_you", title="About you")
    name_q = about.questions[0]
    survey.update_question(about.id, name_q.id, name="full_name")

    channel = survey.add_question(about.id)
    survey.update_question(
        about.id,
        channel.id,
        name="channel",
        title="How did you hear about us?",
        type=QuestionType.RADIOGROUP,
    )
    survey.set_choices(about.id, channel.id, "Search engine\nFriend\nAdvertisement\nOther")

    rating = survey.add_question(about.id)
    survey.update_question(
        about.id,
        rating.id,
        name="satisfaction",
        title="How satisfied are you overall?",
        type=QuestionType.RATING,
        is_required=True,
    )

    contact_ok = survey.add_question(about.id)
    survey.update_question(
        about.id,
        contact_ok.id,
        name="may_contact",
        title="May we contact you about your answers?",
        type=QuestionType.BOOLEAN,
    )

    follow_up = survey.add_section()
    survey.update_section(
        follow_up.id,
        name="follow_up",
        title="Follow-up",
        visible_if="{may_contact} = true",
    )
    email = follow_up.questions[0]
    survey.update_question(
        follow_up.id,
        email.id,
        name="email",
        title="Email address",
        is_required=True,
    )

    topics = survey.add_question(follow_up.id)
    survey.update_question(
        follow_up.id,
        topics.id,
        name="topics",
        title="What should we talk about?",
        type=QuestionType.CHECKBOX,
        choices=["Pricing", "Support", "Features"],
    )

    comments = survey.add_question(follow_up.id)
    survey.update_question(
        follow_up.id,
        comments.id,
        name="comments",
        title="Anything else?",
        type=QuestionType.COMMENT,
        visible_if="{topics} notempty",
    )

    return survey

from hackhub.models import (
    CustomQuestion,
    FeedbackAudience,
    FeedbackFormCreate,
    FeedbackQuestion,
    FeedbackSection,
    RegistrationFormCreate,
    RegistrationTier1,
    RegistrationTier2,
    RegistrationTier3,
    ScaleConfig,
    TemplateCards,
    TemplateColors,
    TemplateCreate,
    TemplateHero,
    TemplateTypography,
)


def _scale(question_id: str, label: str, low: str, high: str, maximum: int = 5) -> FeedbackQuestion:
    return FeedbackQuestion(
        id=question_id,
        type="linear_scale",
        label=label,
        required=True,
        scale_config=ScaleConfig(min=1, max=maximum, min_label=low, max_label=high),
    )


BUILT_IN_FEEDBACK_FORMS = [
    FeedbackFormCreate(
        name="Standard Participant Feedback",
        slug="standard-participant-feedback",
        description="Post-event feedback form for hackathon participants. Captures satisfaction, experience level, and future interest.",
        target_audience=FeedbackAudience.participant,
        sections=[
            FeedbackSection(
                id="basic-info",
                title="Basic Information",
                description="Tell us about yourself",
                questions=[
                    FeedbackQuestion(id="job-title", type="short_text", label="Job Title"),
                    FeedbackQuestion(
                        id="location",
                        type="short_text",
                        label="Location (City, State, Country)",
                        required=True,
                        placeholder="e.g. New York, NY, USA",
                    ),
                ],
            ),
            FeedbackSection(
                id="content-feedback",
                title="Content",
                description="We value your feedback!",
                questions=[
                    _scale(
                        "nps",
                        "Overall, would you recommend this event to a friend or a colleague?",
                        "No",
                        "Absolutely",
                        maximum=10,
                    ),
                    FeedbackQuestion(
                        id="prior-experience",
                        type="multiple_choice",
                        label="Prior to the event, what was your level of experience with the sponsor technologies?",
                        required=True,
                        options=["No experience", "Beginner", "Intermediate", "Expert"],
                    ),
                    _scale(
                        "rate-communication",
                        "How would you rate the communication, resources and support you received?",
                        "Poor",
                        "Excellent",
                    ),
                    FeedbackQuestion(
                        id="improvements",
                        type="long_text",
                        label="What could we improve for the next event?",
                    ),
                ],
            ),
            FeedbackSection(
                id="future",
                title="Looking Ahead",
                questions=[
                    FeedbackQuestion(
                        id="future-events",
                        type="checkbox",
                        label="Which future events would interest you?",
                        options=["Hackathons", "Workshops", "Meetups", "Webinars"],
                    ),
                ],
            ),
        ],
    ),
    FeedbackFormCreate(
        name="Standard Partner Feedback",
        slug="standard-partner-feedback",
        description="Post-event feedback form for sponsors and partners.",
        target_audience=FeedbackAudience.partner,
        sections=[
            FeedbackSection(
                id="partnership",
                title="Partnership",
                questions=[
                    _scale("overall-satisfaction", "How satisfied were you with the partnership?", "Not satisfied", "Very satisfied"),
                    _scale("participant-quality", "How would you rate the quality of participant projects?", "Poor", "Excellent"),
                    FeedbackQuestion(
                        id="goals-met",
                        type="multiple_choice",
                        label="Were your goals for the event met?",
                        required=True,
                        options=["Exceeded", "Met", "Partially met", "Not met"],
                    ),
                    FeedbackQuestion(
                        id="sponsor-again",
                        type="multiple_choice",
                        label="Would you sponsor a future event?",
                        options=["Yes", "Maybe", "No"],
                    ),
                    FeedbackQuestion(id="partner-comments", type="long_text", label="Additional comments"),
                ],
            ),
        ],
    ),
]


BUILT_IN_REGISTRATION_FORMS = [
    RegistrationFormCreate(
        name="Standard Registration",
        slug="standard-registration",
        description="Quick registration with optional profile details for team matching.",
        tier1=RegistrationTier1(show_experience_level=True),
        tier2=RegistrationTier2(enabled=True),
        tier3=RegistrationTier3(
            enabled=False,
            custom_questions=[
                CustomQuestion(
                    id="dietary",
                    label="Dietary restrictions",
                    type="select",
                    options=["None", "Vegetarian", "Vegan", "Gluten-free", "Other"],
                ),
            ],
        ),
    ),
]


BUILT_IN_TEMPLATES = [
    TemplateCreate(
        name="Modern",
        slug="modern",
        description="Clean gradient hero with card-based sections.",
        base_template="modern",
        is_default=True,
    ),
    TemplateCreate(
        name="Tech",
        slug="tech",
        description="Dark, monospace-accented layout for developer events.",
        base_template="tech",
        colors=TemplateColors(
            primary="#00ED64",
            secondary="#016BF8",
            background="#001E2B",
            surface="#112733",
            text="#E8EDEB",
            text_secondary="#889397",
            hero_bg="#001E2B",
            hero_bg_end="#023430",
            hero_text="#00ED64",
            button_bg="#00ED64",
            button_text="#001E2B",
        ),
        typography=TemplateTypography(heading_font="mono", heading_weight=800),
        cards=TemplateCards(border_radius=8, style="border", accent_position="left"),
        hero=TemplateHero(style="solid", button_style="square"),
    ),
    TemplateCreate(
        name="Bold",
        slug="bold",
        description="High-contrast layout with large type.",
        base_template="bold",
        colors=TemplateColors(primary="#E3004F", secondary="#FFC010", hero_bg="#E3004F", hero_bg_end="#7A0029"),
        typography=TemplateTypography(heading_weight=900, scale="large"),
        cards=TemplateCards(border_radius=16, style="flat", accent_position="top"),
        hero=TemplateHero(style="gradient", button_style="pill"),
    ),
]

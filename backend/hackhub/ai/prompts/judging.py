SUMMARY_SYSTEM_PROMPT = (
    "You are summarizing hackathon projects for judges. Write exactly 2-3 sentences. "
    "Focus on what the project does, the key technology used, and what makes it novel "
    "or impactful. Be concise and specific."
)

FEEDBACK_SYSTEM_PROMPT = (
    "You are synthesizing judge feedback for a hackathon team. Combine the judge scores "
    "and comments into 2-3 constructive paragraphs. Acknowledge strengths genuinely, give "
    "specific and actionable improvement suggestions, and end on an encouraging note. "
    "Do not use bullet points; write in flowing prose."
)


def build_summary_prompt(name: str, description: str, technologies: list[str], innovations: str = "") -> str:
    prompt = f"Project: {name}\nDescription: {description}\nTechnologies: {', '.join(technologies)}"
    if innovations:
        prompt += f"\nInnovations: {innovations}"
    return prompt


def build_feedback_prompt(
    *,
    name: str,
    description: str,
    technologies: list[str],
    innovations: str,
    average_scores: dict[str, float],
    comments: list[str],
) -> str:
    score_lines = "\n".join(
        f"- {criterion.replace('_', ' ').title()}: {value}"
        for criterion, value in average_scores.items()
    )
    comment_lines = "\n".join(f"- {c}" for c in comments) or "(No written comments submitted)"
    innovations_line = f"Innovations: {innovations}\n" if innovations else ""
    return (
        f"Project: {name}\n"
        f"Description: {description}\n"
        f"Technologies: {', '.join(technologies)}\n"
        f"{innovations_line}\n"
        f"Average judge scores (out of 10):\n{score_lines}\n\n"
        f"Judge written comments:\n{comment_lines}\n\n"
        "Write synthesized feedback for the team."
    )

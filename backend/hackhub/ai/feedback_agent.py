from hackhub.ai.artifacts import JudgeFeedbackInput
from hackhub.ai.base import BaseAgent
from hackhub.ai.prompts.judging import FEEDBACK_SYSTEM_PROMPT, build_feedback_prompt


class FeedbackAgent(BaseAgent[JudgeFeedbackInput, str]):
    """Turns judges' scores and comments into prose feedback for the team."""

    async def run(self, input_data: JudgeFeedbackInput) -> str:
        project = input_data.project
        return await self.llm.generate_text(
            FEEDBACK_SYSTEM_PROMPT,
            build_feedback_prompt(
                name=project.name,
                description=project.description,
                technologies=project.technologies,
                innovations=project.innovations,
                average_scores=input_data.average_scores,
                comments=input_data.comments,
            ),
        )

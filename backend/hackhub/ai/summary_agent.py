from hackhub.ai.artifacts import ProjectBrief
from hackhub.ai.base import BaseAgent
from hackhub.ai.prompts.judging import SUMMARY_SYSTEM_PROMPT, build_summary_prompt


class SummaryAgent(BaseAgent[ProjectBrief, str]):
    """Writes the short project summary judges see next to a submission."""

    async def run(self, input_data: ProjectBrief) -> str:
        return await self.llm.generate_text(
            SUMMARY_SYSTEM_PROMPT,
            build_summary_prompt(
                input_data.name,
                input_data.description,
                input_data.technologies,
                input_data.innovations,
            ),
            temperature=0.6,
        )

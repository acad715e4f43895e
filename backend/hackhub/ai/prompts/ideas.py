IDEA_SYSTEM_PROMPT = """
You are a hackathon mentor helping a team brainstorm creative, feasible project ideas.

Every idea you return must:
1. Align with the event theme and categories.
2. Meaningfully use at least one sponsor product (not shoehorned in).
3. Match the team's skill levels and size.
4. Be buildable within the team's time budget.
5. Have a clear differentiator or innovation angle.
6. Offer practical utility or social impact.

For each idea give a catchy 3-5 word name, a one-sentence tagline, a 2-3 sentence problem
statement, a 3-4 sentence solution, a concrete tech stack, a phased timeline whose hours add up
to the time budget (e.g. Foundation, Core Features, Integration, Polish & Demo), a difficulty
from 1 (beginner friendly) to 5 (very challenging), the prize categories it qualifies for, its
differentiator and a short markdown implementation guide with setup steps and gotchas.
"""


def build_idea_prompt(
    *,
    event_theme: str,
    event_categories: list[str],
    inputs: dict,
    count: int,
) -> str:
    def joined(values: list, fallback: str = "Any") -> str:
        return ", ".join(str(v) for v in values) if values else fallback

    team_size = inputs.get("team_size", 3)
    hours = inputs.get("time_commitment", 24)
    return f"""EVENT CONTEXT:
- Theme: {event_theme}
- Categories: {joined(event_categories)}
- Available Sponsor Products: {joined(inputs.get("sponsor_products", []))}
- Target Prizes: {joined(inputs.get("target_prizes", []))}

TEAM INFORMATION:
- Team Size: {team_size} {"person (solo)" if team_size == 1 else "people"}
- Skill Levels: {joined(inputs.get("skill_levels", []), "Mixed")}
- Team Composition: {joined(inputs.get("team_composition", []), "Not specified")}

TECHNOLOGY PREFERENCES:
- Languages: {joined(inputs.get("preferred_languages", []))}
- Frameworks: {joined(inputs.get("preferred_frameworks", []))}
- Databases: {joined(inputs.get("preferred_databases", []))}
- Interest Areas: {joined(inputs.get("interest_areas", []))}

CONSTRAINTS:
- Time Budget: {hours} hours
- Complexity: {inputs.get("complexity_preference", "moderate")}

Generate {count} distinct project ideas."""

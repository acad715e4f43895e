from typing import Literal

from pydantic import BaseModel, Field


class IdeaInputs(BaseModel):
    """What a team tells the idea generator about itself."""
    team_size: int = Field(default=3, ge=1, le=10)
    skill_levels: list[Literal["beginner", "intermediate", "advanced"]] = Field(default_factory=list)
    team_composition: list[str] = Field(default_factory=list)
    preferred_languages: list[str] = Field(default_factory=list)
    preferred_frameworks: list[str] = Field(default_factory=list)
    preferred_databases: list[str] = Field(default_factory=list)
    sponsor_products: list[str] = Field(default_factory=list)
    interest_areas: list[str] = Field(default_factory=list)
    time_commitment: int = Field(default=24, ge=1, le=168, description="Total hackathon hours")
    complexity_preference: Literal["simple", "moderate", "ambitious"] = "moderate"
    target_prizes: list[str] = Field(default_factory=list)


class TechStack(BaseModel):
    frontend: list[str] = Field(default_factory=list, description="Frontend frameworks and libraries")
    backend: list[str] = Field(default_factory=list, description="Backend languages and frameworks")
    database: list[str] = Field(default_factory=list, description="Databases and storage")
    apis: list[str] = Field(default_factory=list, description="Third-party APIs and services")
    deployment: list[str] = Field(default_factory=list, description="Hosting and deployment targets")


class TimelinePhase(BaseModel):
    phase: str = Field(description="Short phase name (e.g., 'Setup', 'Core features')")
    hours: str = Field(description="Hours allotted to the phase (e.g., '4' or '4-6')")
    tasks: list[str] = Field(default_factory=list, description="Concrete tasks for the phase")


class GeneratedIdea(BaseModel):
    """Artifact produced by the project idea generator."""
    name: str = Field(description="Catchy project name")
    tagline: str = Field(description="One-line pitch")
    problem_statement: str = Field(description="The problem the project solves")
    solution: str = Field(description="How the project solves it")
    tech_stack: TechStack = Field(default_factory=TechStack)
    timeline: list[TimelinePhase] = Field(default_factory=list, description="Phased build plan that fits the hackathon duration")
    difficulty: int = Field(default=3, ge=1, le=5, description="Difficulty from 1 (easy) to 5 (hard)")
    prize_categories: list[str] = Field(default_factory=list, description="Prize categories the idea targets")
    differentiator: str = Field(default="", description="What makes this idea stand out to judges")
    implementation_guide: str = Field(default="", description="Markdown getting-started guide")


class GeneratedIdeas(BaseModel):
    ideas: list[GeneratedIdea] = Field(description="Distinct project ideas for the team")


class IdeaRequest(BaseModel):
    event_theme: str
    event_categories: list[str] = Field(default_factory=list)
    inputs: IdeaInputs = Field(default_factory=IdeaInputs)
    count: int = Field(default=3, ge=1, le=5)


class ProjectBrief(BaseModel):
    """What the summary and feedback agents know about a project."""
    name: str
    description: str
    technologies: list[str] = Field(default_factory=list)
    innovations: str = ""


class JudgeFeedbackInput(BaseModel):
    project: ProjectBrief
    average_scores: dict[str, float]
    comments: list[str] = Field(default_factory=list)

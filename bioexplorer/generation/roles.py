"""
Role Prompts
Wraps a user's question in a persona-specific template before retrieval.
Each role also carries a system prompt that is sent to the model with the
wrapped question. Unknown role ids leave the question untouched.
"""

from typing import Callable, Optional

from pydantic import BaseModel


class Role(BaseModel):
    id: str
    name: str
    description: str
    system_prompt: str
    template: Callable[[str], str]

    def public_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


def _scientist(question: str) -> str:
    return f"""As a research scientist interested in space biology, help me understand: {question}

Please provide:
1. Scientific mechanisms involved
2. Key findings from the research
3. Any contradicting studies or consensus
4. Potential hypotheses for future research"""


def _mission_planner(question: str) -> str:
    return f"""As a mission planner preparing for long-duration space missions (Moon/Mars), provide actionable insights about: {question}

Please provide:
1. Key health/safety risks identified
2. Available countermeasures or interventions
3. Implementation recommendations
4. Critical gaps that need addressing for mission safety"""


def _funding_manager(question: str) -> str:
    return f"""As a research funding manager looking for investment opportunities in space biology, analyze: {question}

Please provide:
1. Current state of research (consensus vs. gaps)
2. Understudied areas needing investment
3. High-impact research opportunities
4. Strategic recommendations for funding priorities"""


def _general(question: str) -> str:
    return f"""Provide a comprehensive overview about: {question}

Please include:
1. Key findings from the research
2. Main conclusions and implications
3. Important context and background
4. Relevant citations from the publications"""


SCIENTIST_SYSTEM_PROMPT = """You are an expert research scientist assistant specializing in space biology.

Your role is to:
- Analyze research from a scientific perspective
- Identify mechanisms and biological pathways
- Point out contradicting or supporting studies
- Suggest follow-up hypotheses
- Explain technical details clearly

When answering, focus on:
- Scientific mechanisms and causation
- Research methodology
- Data interpretation
- Areas needing further investigation"""

MISSION_PLANNER_SYSTEM_PROMPT = """You are an expert mission planning assistant for long-duration space missions.

Your role is to:
- Assess health and safety risks
- Identify practical countermeasures
- Provide actionable recommendations
- Focus on mission-critical information
- Consider crew health and mission success

When answering, focus on:
- Risk assessment and severity
- Available countermeasures and interventions
- Timeline and duration considerations
- Operational feasibility"""

FUNDING_MANAGER_SYSTEM_PROMPT = """You are an expert research funding manager focused on space biology investments.

Your role is to:
- Identify research gaps and opportunities
- Assess scientific consensus and maturity
- Highlight high-impact investment areas
- Evaluate research priorities
- Spot emerging trends

When answering, focus on:
- Research gaps and understudied areas
- Areas with strong consensus vs. debate
- High-impact investment opportunities
- Strategic research priorities"""

GENERAL_SYSTEM_PROMPT = """You are a helpful assistant providing clear, comprehensive overviews of space biology research.

Your role is to:
- Explain complex concepts clearly
- Provide balanced summaries
- Make research accessible
- Highlight key findings

When answering, focus on:
- Clear, accessible explanations
- Key findings and takeaways
- Balanced perspective
- Practical implications"""


ROLES: dict[str, Role] = {
    role.id: role
    for role in [
        Role(
            id="scientist",
            name="Scientist / Researcher",
            description="Generate hypotheses, find related studies",
            system_prompt=SCIENTIST_SYSTEM_PROMPT,
            template=_scientist,
        ),
        Role(
            id="mission-planner",
            name="Mission Planner",
            description="Safety data, risk assessments, actionable insights",
            system_prompt=MISSION_PLANNER_SYSTEM_PROMPT,
            template=_mission_planner,
        ),
        Role(
            id="funding-manager",
            name="Funding Manager",
            description="Identify gaps, investment opportunities",
            system_prompt=FUNDING_MANAGER_SYSTEM_PROMPT,
            template=_funding_manager,
        ),
        Role(
            id="general",
            name="General User",
            description="General information and overview",
            system_prompt=GENERAL_SYSTEM_PROMPT,
            template=_general,
        ),
    ]
}


def get_role_prompt(role_id: Optional[str], question: str) -> str:
    """Wrap the question for the given role, or return it unchanged."""
    role = ROLES.get(role_id or "")
    if role is None:
        return question
    return role.template(question)


def get_role_system_prompt(role_id: Optional[str]) -> str:
    role = ROLES.get(role_id or "")
    return role.system_prompt if role else ""


def list_roles() -> list[dict]:
    return [role.public_dict() for role in ROLES.values()]

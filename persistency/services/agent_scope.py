"""
Agent-Scope Filter

Restricts a carrier's normalized policies to the writing agents a viewer is
allowed to see. The allow-list itself comes from the hierarchy collaborator;
nothing here walks the reporting tree.

Agent numbers are compared after stripping spreadsheet formula escaping
(`=`, quotes, parentheses) and whitespace, on both sides.

Also provides writing-agent extraction, used by the upload flow to register
the agents present in a roster.
"""

import re
from typing import Iterable, List, Optional

from persistency.models.enums import FilterMode
from persistency.models.schemas import AgentScope, NormalizedPolicy, WritingAgent


_ESCAPING = re.compile(r'[="()\s]')


def normalize_agent_number(value: Optional[str]) -> str:
    """
    Strip formula escaping and whitespace from an agent number.

    Example:
        >>> normalize_agent_number('=("AB1234")')
        'AB1234'
    """
    if value is None:
        return ''
    return _ESCAPING.sub('', str(value))


def filter_policies(
    policies: List[NormalizedPolicy],
    allowed_agent_numbers: Iterable[str],
    mode: FilterMode,
) -> List[NormalizedPolicy]:
    """
    Keep only policies written by an allowed agent.

    Args:
        policies: Normalized policies of one carrier
        allowed_agent_numbers: Agent numbers the viewer may see
        mode: UNRESTRICTED returns the input unchanged

    Returns:
        The permitted subset, in input order
    """
    if mode == FilterMode.UNRESTRICTED:
        return policies

    allowed = {normalize_agent_number(number) for number in allowed_agent_numbers}
    allowed.discard('')
    return [
        policy for policy in policies
        if normalize_agent_number(policy.writingAgentNumber) in allowed
    ]


def apply_scope(policies: List[NormalizedPolicy], scope: Optional[AgentScope]) -> List[NormalizedPolicy]:
    """filter_policies driven by an AgentScope; None means unrestricted."""
    if scope is None:
        return policies
    return filter_policies(policies, scope.allowedAgentNumbers, scope.mode)


def extract_writing_agents(policies: Iterable[NormalizedPolicy]) -> List[WritingAgent]:
    """
    Unique writing agents in a roster, in first-seen order.

    Rows lacking either the agent number or the agent name are ignored.
    """
    seen = set()
    agents = []
    for policy in policies:
        number = normalize_agent_number(policy.writingAgentNumber)
        name = (policy.writingAgentName or '').strip()
        if not number or not name:
            continue
        if (number, name) in seen:
            continue
        seen.add((number, name))
        agents.append(WritingAgent(agentNumber=number, agentName=name))
    return agents


__all__ = [
    'normalize_agent_number',
    'filter_policies',
    'apply_scope',
    'extract_writing_agents',
]

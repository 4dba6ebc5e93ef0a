"""
Prompt templates for the swarm phases.

Each template is filled with str.format(). The first line of every template
is a fixed instruction so backends (and tests) can tell the phases apart.
"""

DECISION_INSTRUCTION = "Provide your expert analysis and recommendation. Be specific and actionable."

AGENT_DECISION_PROMPT = """You are a specialized AI agent with the role of {role} and expertise in {specializations}.

Task: {description}

Context: {context}

""" + DECISION_INSTRUCTION

CONSENSUS_INSTRUCTION = "Synthesize these expert opinions into a single, coherent recommendation:"

CONSENSUS_EXPERT_ENTRY = """{role} ({specializations}) - Confidence: {confidence:.0f}%:
{text}"""

CONSENSUS_PROMPT = CONSENSUS_INSTRUCTION + """

{experts}

Create a unified recommendation that incorporates the best insights from all experts.
Experts are listed from highest to lowest confidence; where they conflict, follow the higher-confidence opinion."""

ALTERNATIVES_INSTRUCTION = "Based on these minority viewpoints, generate {count} alternative approaches:"

ALTERNATIVES_PROMPT = ALTERNATIVES_INSTRUCTION + """

{opinions}

Main consensus: {consensus}

Provide {count} brief alternative strategies that differ from the consensus, one per line."""

ROSTER_DECISION_INSTRUCTION = "Decide how to handle this email. Respond with JSON only."

ROSTER_DECISION_PROMPT = ROSTER_DECISION_INSTRUCTION + """

You are the {agent_id} agent ({role}; focus: {specializations}).
Available actions and your confidence in each:
{capabilities}

From: {sender}
Subject: {subject}
Attachment: {has_attachment}

{body}

Return an object with keys "action" (one of the available actions), "reasoning",
"confidence" (0-1), "alternatives" (list of other actions) and "impact" (low, medium or high)."""

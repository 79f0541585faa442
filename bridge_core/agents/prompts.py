# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Prompt builders for evidence gathering, contact analysis and JSON repair.
"""

from __future__ import annotations

import json
from typing import Sequence

from bridge_core.config import StrategicFocus
from bridge_core.schema.contact import Contact
from bridge_core.schema.evidence import Evidence

SYSTEM_INSTRUCTION = """
ROLE: You are Bridge, an expert Contact Intelligence + Values-Aligned Matching System built exclusively for Project Leviathan.

CORE OBJECTIVE:
Your job is to transform raw contacts into strategic opportunities for Leviathan.
You must strictly enforce Leviathan's values and guardrails as defined in the provided Thesis/Context.

HARD CONSTRAINTS (NON-NEGOTIABLE):
1. **EVIDENCE LINKS**: Every claim in your summary must be backed by a specific URL from the verified evidence.
2. **NO HALLUCINATIONS**: If you cannot verify the person exists with High Confidence, mark 'identityConfidence' low and flag it.
3. **VALUES ENFORCEMENT**: Misaligned capital is worse than no capital. Flag predatory behavior immediately.

SCORING DIMENSIONS (Internal use for ranking):
- Investor Fit (0-100)
- Values Alignment (0-100)
- Govt Access (0-100)
- Maritime Relevance (0-100)
- Connector Score (0-100)
"""

FOCUS_MODE_PROMPTS: dict[StrategicFocus, str] = {
    StrategicFocus.BALANCED: "Evaluate equally across all dimensions.",
    StrategicFocus.GATEKEEPER: "Prioritize Values Alignment and Connector Score. We need trusted navigators.",
    StrategicFocus.DEAL_HUNTER: "Prioritize Investor Fit and Maritime Relevance. We are actively fundraising.",
    StrategicFocus.GOVT_INTEL: "Prioritize Govt Access and Maritime Relevance. We need public sector intel.",
}

_SCORE_SCHEMA = (
    '{ "score": 0-100, "confidence": 0-100, "reasoning": "string", '
    '"contributingFactors": ["string"], "missingDataPenalty": boolean }'
)

ANALYSIS_OUTPUT_SCHEMA = f"""{{
  "scores": {{
    "investorFit": {_SCORE_SCHEMA},
    "valuesAlignment": {_SCORE_SCHEMA},
    "govtAccess": {_SCORE_SCHEMA},
    "maritimeRelevance": {_SCORE_SCHEMA},
    "connectorScore": {_SCORE_SCHEMA},
    "overallConfidence": 0-100
  }},
  "enrichment": {{
    "summary": "2-3 sentence executive summary",
    "alignmentRisks": ["list of any red flags or concerns"],
    "evidenceLinks": [{{ "claim": "string", "url": "string", "timestamp": "ISO date", "confidence": 0-100 }}],
    "recommendedAngle": "strategic approach suggestion",
    "recommendedAction": "next step",
    "tracks": ["Investment" | "Government" | "Strategic Partner"],
    "flaggedAttributes": ["notable characteristics"],
    "identityConfidence": 0-100,
    "collisionRisk": boolean
  }}
}}"""


def build_evidence_prompt(contact: Contact, linkedin_url: str | None) -> str:
    """Due-diligence prompt asking for a bare JSON array of evidence objects."""
    return f"""
You are conducting contact due diligence.
Use web search to find verifiable public evidence for this person.

Target:
- Name: {contact.name}
- Headline: {contact.headline}
- Location: {contact.location}
- Source Text: {contact.source}
- Raw Notes: {contact.raw_text or 'None'}
- Known LinkedIn URL: {linkedin_url or 'None'}

Rules:
- Return ONLY a JSON array.
- Include 3 to 6 evidence objects.
- Prefer one LinkedIn URL (if present) and multiple non-LinkedIn sources.
- No placeholders. No guessed or fake URLs.

Schema:
[
  {{"claim":"string","url":"https://...","timestamp":"ISO date","confidence":0-100}}
]
"""


def format_verified_evidence(evidence: Sequence[Evidence]) -> str:
    if not evidence:
        return "[]"
    return json.dumps([ev.to_dict() for ev in evidence], indent=2, ensure_ascii=False)


def build_analysis_prompt(
    contact: Contact,
    *,
    thesis_context: str,
    focus_mode: StrategicFocus,
    linkedin_url: str | None,
    verified_evidence: Sequence[Evidence],
) -> str:
    """
    Analysis prompt restricted to the verified evidence set.

    The model is told not to introduce facts or URLs outside
    VERIFIED_EVIDENCE; the output normalizer enforces this regardless.
    """
    focus = FOCUS_MODE_PROMPTS.get(focus_mode, FOCUS_MODE_PROMPTS[StrategicFocus.BALANCED])
    return f"""
{SYSTEM_INSTRUCTION}

=== THESIS/CONTEXT ===
{thesis_context}

=== CURRENT STRATEGIC FOCUS ===
{focus}

=== TARGET CONTACT ===
Name: {contact.name}
Headline: {contact.headline}
Location: {contact.location}
Source: {contact.source}
Raw Notes: {contact.raw_text or 'None'}
Known LinkedIn URL: {linkedin_url or 'None provided'}

=== VERIFICATION RULES ===
- You are restricted to the VERIFIED_EVIDENCE list below.
- Do not introduce new facts or URLs not present in VERIFIED_EVIDENCE.
- If evidence is weak or sparse, lower confidence and mark risks clearly.

=== VERIFIED_EVIDENCE ===
{format_verified_evidence(verified_evidence)}

=== YOUR TASK ===
Analyze this contact and return a JSON object with the following structure. DO NOT include markdown code blocks, just return raw JSON:

{ANALYSIS_OUTPUT_SCHEMA}
"""


def build_json_repair_prompt(malformed_text: str) -> str:
    return f"""
You are a JSON repair utility.
Convert the content below into a single valid JSON object.
Return ONLY raw JSON and nothing else.

CONTENT:
{malformed_text}
"""

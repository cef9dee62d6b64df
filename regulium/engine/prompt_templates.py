"""Prompt templates for compliance evaluation and relevance screening.

Single Responsibility: String templates only. No logic.
Separates presentation (templates) from behavior (prompt building).
"""

# ---------------------------------------------------------------------------
# System instructions
# ---------------------------------------------------------------------------

EVALUATION_SYSTEM_PROMPT = (
    "You are a regulatory compliance expert specializing in digital services, "
    "social media, and online platform regulations. Analyze the feature "
    "implementation against the law requirements and provide a comprehensive "
    "compliance assessment. Always respond in valid JSON format."
)

SCREENING_SYSTEM_PROMPT = (
    "You are a regulatory compliance expert. You decide which laws in a catalog "
    "could apply to a product feature. Be conservative and always respond with "
    "a JSON array only."
)

# ---------------------------------------------------------------------------
# Pair evaluation
# ---------------------------------------------------------------------------

EVALUATION_PROMPT = """\
Feature: {feature_name}
Description: {feature_description}

Law: {law_title}
Description: {law_description}
{terminology_block}{corrections_block}
Analyze the compliance of this feature against the law. Consider:
1. Does the feature implementation align with the law's requirements?
2. Are there any potential violations or compliance gaps?
3. What specific aspects need attention?

Respond in this exact JSON format:
{{
  "compliance_status": "compliant|non_compliant|requires_review",
  "reasoning": "Detailed explanation of compliance assessment",
  "recommendations": ["Specific action item 1", "Specific action item 2", "Specific action item 3"]
}}

Ensure the response is valid JSON with no additional text before or after."""

CORRECTIONS_HEADER = "Previous corrections for this feature-law combination:"

TERMINOLOGY_HEADER = "Terminology used in the feature description:"

# ---------------------------------------------------------------------------
# Relevance screening
# ---------------------------------------------------------------------------

SCREENING_PROMPT = """\
Feature: {feature_name}
Description: {feature_description}

Law catalog:
{law_titles}

Which of the laws above are relevant to this feature? A law is relevant only if
the feature's functionality could plausibly interact with or need to comply with it.
When in doubt, leave the law out.

Respond with a JSON array containing the exact titles of the relevant laws, for example:
["Law title A", "Law title B"]

Respond with [] if no law is relevant. No additional text before or after the array."""

"""Prompt construction for security vector scoring.

Each enabled vector contributes one line: its label, a scoring rubric and
the 0-100 scale. The reply format is a flat JSON object whose keys are
exactly the enabled vector ids.
"""

from content_audit.vectors.models import SecurityVector

# Rubrics for the built-in vectors
VECTOR_CRITERIA: dict[str, str] = {
    "pii_disclosure": (
        "Analyze for potential disclosure of personally identifiable information including "
        "names, addresses, phone numbers, email addresses, social security numbers, credit "
        "card numbers, or other personal data"
    ),
    "credentials_disclosure": (
        "Detect potential exposure of credentials, API keys, passwords, tokens, access keys, "
        "database connection strings, or other sensitive authentication data"
    ),
}

GENERIC_CRITERIA = "Analyze for general security risks in the content"

PROMPT_TEMPLATE = """<task>Analyze the following content for security risks.</task>
<content>
{content}
</content>

<security_vectors>
{vectors}
</security_vectors>

<instructions>Provide precise risk scores between 0 and 100 for each security vector. Use any integer values that best represent the risk level.</instructions>
<output_format>Respond with a simple JSON object containing only the required scores:
{json_template}</output_format>"""


def vector_criteria(vector: SecurityVector) -> str:
    """Built-in rubric, else the vector's own description, else the generic one."""
    return VECTOR_CRITERIA.get(vector.id) or vector.description or GENERIC_CRITERIA


def json_template(vectors: list[SecurityVector]) -> str:
    return "{" + ", ".join(f'"{v.id}": number' for v in vectors) + "}"


def build_prompt(content: str, vectors: list[SecurityVector]) -> str:
    lines = [
        f"- {v.label}: {vector_criteria(v)} (Score 0-100, where 0=no risk, 100=high risk)"
        for v in vectors
    ]
    return PROMPT_TEMPLATE.format(
        content=content,
        vectors="\n".join(lines),
        json_template=json_template(vectors),
    )

"""Prompts for legal document generation.

The template structure and the user's answers are opaque input; these helpers
only wrap them in the standard drafting instructions.
"""

import json
import re
from typing import Any

SYSTEM_INSTRUCTIONS = """You are an expert legal document generator.

Your role is to create legally structured, coherent, and professional contracts and legal documents based strictly on user inputs and template requirements.

CRITICAL RULES:
1. You must avoid offering legal advice; only structure the document using the provided information
2. Ensure the final output uses consistent formatting, spacing, paragraph breaks, clause numbering, and clear section headers
3. Maintain professional legal language and terminology appropriate for the document type
4. Do not add information that was not provided by the user unless it's a standard legal boilerplate clause
5. If information is missing, use neutral, standard legal language rather than making assumptions
6. Output only the document text in markdown format - no explanations, commentary, or meta-text
7. Use proper markdown formatting: ## for main sections, ### for subsections, **bold** for emphasis
8. Ensure all user-provided values (names, dates, amounts, etc.) are accurately inserted in the correct locations

Your output must be a complete, ready-to-use legal document that can be directly exported or saved."""

GENERATION_INSTRUCTIONS = """## Generation Instructions

### Content Requirements
- Use the template structure as the foundation for the document format
- Insert ALL user-provided information into the correct positions within the document
- Do not omit any user-provided information
- If information is missing for a standard clause, use neutral, legally standard language

### Legal Structure and Formatting
- Use consistent numbering for sections (1., 2., 3.) and subsections (a., b., c.)
- Use markdown ## for main sections and ### for subsections
- DO NOT include signature lines or signature sections - signatures are handled separately
- Add date fields where appropriate (effective date, execution date, etc.)

### Output Format
- Produce ONLY the final document text, with no commentary or notes
- Use bold (**text**) for defined terms, party names when first introduced, key dates and amounts
- The document must be complete and ready for use, not a draft or template

Begin generating the document now."""

TEMPLATE_CODE_INSTRUCTIONS = """You are an expert JavaScript developer. Generate clean, production-ready JavaScript template function code for legal document generation.
Output ONLY the function code, no explanations or markdown code blocks."""

# Words that mark a template output as instructions for the model
_INSTRUCTION_MARKERS = (
    "generate",
    "create",
    "requirements:",
    "include sections:",
    "instructions:",
)

_CODE_FENCE_PATTERN = re.compile(r"^```(?:javascript|js)?\n?|```$", re.MULTILINE)


def is_direct_document(template_output: str) -> bool:
    """Whether a template already produced a finished document.

    Finished documents start with a markdown heading, or contain section
    headings and none of the instruction markers prompts use.
    """
    stripped = template_output.strip()
    if stripped.startswith("#"):
        return True

    lowered = stripped.lower()
    return "##" in stripped and not any(m in lowered for m in _INSTRUCTION_MARKERS)


def build_legal_document_prompt(
    template_name: str,
    user_inputs: dict[str, Any],
    *,
    template_structure: str | None = None,
    customizations: list[str] | None = None,
    additional_context: str | None = None,
) -> str:
    """Build the user prompt for generating a legal document.

    Args:
        template_name: Document type shown to the model (e.g. "NDA").
        user_inputs: Form answers, inserted verbatim as JSON.
        template_structure: Template output describing the document.
        customizations: Extra clauses requested by the user.
        additional_context: Free-form context appended at the end.

    Returns:
        The complete prompt.
    """
    sections = [
        "Your task is to generate a legally-structured, professional document.",
        f"Document Type: {template_name}",
    ]

    if template_structure:
        sections.append(f"## Template Structure/Requirements\n{template_structure}")

    sections.append(
        "## User-Provided Information\n"
        "The following information has been provided by the user and must be "
        "accurately incorporated into the document:\n"
        + json.dumps(user_inputs, indent=2, ensure_ascii=False, default=str)
    )

    if customizations:
        numbered = "\n".join(f"{i}. {c}" for i, c in enumerate(customizations, 1))
        sections.append(
            "## Additional Clauses/Customizations\n"
            f"The user has requested these additional provisions:\n{numbered}"
        )

    sections.append(GENERATION_INSTRUCTIONS)

    if additional_context:
        sections.append(f"## Additional Context\n{additional_context}")

    return "\n\n".join(sections)


def build_template_code_prompt(
    title: str, description: str, form_schema: Any
) -> str:
    """Build the prompt asking for a JavaScript template function."""
    schema = json.dumps(form_schema, indent=2, ensure_ascii=False)
    return f"""{TEMPLATE_CODE_INSTRUCTIONS}

Generate a JavaScript template function for a legal document generator.

Document Title: {title}
Description: {description}

Form Schema (fields that will be available in the values object):
{schema}

Requirements:
1. Create a function named "template" that takes a "values" parameter (object with form field values)
2. Return a markdown-formatted legal document string
3. Use template literals with ${{}} interpolation for dynamic values
4. Include proper legal document structure (sections, headings, clauses)
5. Use the field values from the "values" object
6. Output ONLY the function code, no explanations or markdown code blocks"""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model may wrap code in."""
    return _CODE_FENCE_PATTERN.sub("", text).strip()

"""
Prompt and schema definitions for personal data screening.

Detection and anonymization are two separate structured completions; both
prompts and their JSON schemas live here so the real service and its tests
share a single definition.
"""
from pilotvoice.services.ai.openrouter_api import ResponseSchema

DETECTION_SYSTEM_PROMPT = """You are a GDPR compliance assistant. Your task is to detect personal data in user feedback.

Personal data includes:
- Full names or identifiable names (first name + last name, or unique nicknames)
- Email addresses
- Phone numbers
- Physical addresses
- Government IDs or passport numbers
- Any other information that could identify a specific person

Rules:
- Generic terms like "the pilot", "the organizer", "someone" are NOT personal data
- Single common first names without context may not be personal data
- Be conservative: when in doubt about identification, mark as potential personal data
- Provide confidence score based on how certain you are"""

ANONYMIZATION_SYSTEM_PROMPT = """You are an anonymization assistant. Your task is to anonymize user feedback while preserving the meaning and tone.

Rules:
- Remove or replace all personal names with generic terms (e.g., "the pilot", "the organizer", "a participant")
- Replace emails with generic descriptions (e.g., "the contact email")
- Replace phone numbers with generic descriptions (e.g., "the phone number")
- Preserve the sentiment and key points of the feedback
- Keep the same language as the input
- Maintain natural flow and readability
- Do not add any explanations or meta-commentary about the anonymization process"""

DETECTION_SCHEMA = ResponseSchema(
    name="personal_data_detection",
    schema={
        "type": "object",
        "properties": {
            "containsPersonalData": {
                "type": "boolean",
                "description": "Whether the text contains personal data (names, emails, phone numbers, etc.)",
            },
            "confidence": {
                "type": "number",
                "description": "Confidence level between 0 and 1",
            },
            "detectedDataTypes": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Types of personal data detected (e.g., 'full_name', 'email', 'phone')",
            },
            "explanation": {
                "type": "string",
                "description": "Brief explanation of what personal data was detected",
            },
        },
        "required": ["containsPersonalData", "confidence", "detectedDataTypes", "explanation"],
        "additionalProperties": False,
    },
)

ANONYMIZATION_SCHEMA = ResponseSchema(
    name="text_anonymization",
    schema={
        "type": "object",
        "properties": {
            "anonymizedText": {
                "type": "string",
                "description": "The anonymized version of the input text",
            },
        },
        "required": ["anonymizedText"],
        "additionalProperties": False,
    },
)


def build_detection_prompt(text: str) -> str:
    return f"Analyze this text for personal data:\n\n{text}"


def build_anonymization_prompt(text: str) -> str:
    return f"Anonymize this feedback:\n\n{text}"

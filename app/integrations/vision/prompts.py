"""
Forensic classification prompt.

Sent verbatim as a single user turn alongside the image; the verdict parser
depends on the JSON keys it asks for.
"""

FORENSICS_PROMPT = (
    "You are an AI image forensics system.\n"
    "\n"
    "Classify the image as ONE of:\n"
    "- AI Generated\n"
    "- Manipulated\n"
    "- Real Photograph\n"
    "\n"
    "Evaluate lighting, textures, edges, distortions, and generative artifacts.\n"
    "\n"
    "Respond ONLY in JSON:\n"
    "{\n"
    "  \"classification\": \"AI Generated | Manipulated | Real Photograph\",\n"
    "  \"confidence_raw\": number between 0 and 100,\n"
    "  \"reason\": \"1 short sentence explanation\"\n"
    "}"
)


def get_classification_prompt() -> str:
    return FORENSICS_PROMPT

"""
Centralized AI Prompt Repository
- Keeps prompt wording out of the synthesis and extraction logic
- Facilitates auditing and refinement
"""

# --- EXTRACTION PROMPTS ---
ITP_SCORES_EXTRACTION = (
    "These images show an Ideal Team Player (ITP) assessment with scores for the traits "
    "Humble, Hungry and Smart, each on a 1-10 scale. Read the three scores. "
    "Respond with JSON only, no markdown, exactly in this shape: "
    '{"humble": <int>, "hungry": <int>, "smart": <int>}'
)

SELF_REVIEW_EXTRACTION = (
    "These images are screenshots of an employee's written self review. "
    "Transcribe all of the text they contain, preserving question and answer order. "
    "Return only the transcribed text."
)

# --- SYNTHESIS PROMPTS ---
SYNTHESIS_SYSTEM = (
    "You are an experienced HR partner writing a professional performance review. "
    "Be balanced, specific and actionable. Use only the information provided."
)

SYNTHESIS_USER_TEMPLATE = """Synthesize a professional performance review from the following sources.

AVAILABLE SOURCES: {available_sources}

{source_blocks}

Write the review with exactly these four headed sections, in this order:
1. Greatest Strengths
2. Development Feedback
3. Goals for Next Year
4. Overall Assessment"""

SOURCE_BLOCK_TEMPLATE = "{title}:\n{content}"

# helper to build prompts
def get_prompt(template: str, **kwargs) -> str:
    return template.format(**kwargs)

"""QuizPortal Templates - Prompts para geracao, explicacao e plano de estudo."""

# =============================================================================
# SYSTEM PROMPTS
# =============================================================================

GENERATION_SYSTEM_PROMPT = """You generate multiple-choice quiz questions. Respond ONLY with a valid JSON array, no extra text."""

TUTOR_SYSTEM_PROMPT = """You are a concise, encouraging tutor. Answer in plain text without markdown headings."""

# =============================================================================
# GERACAO DE PERGUNTAS
# =============================================================================

QUESTION_FORMAT = """[
  {{
    "question": "text",
    "options": ["option 1", "option 2", "option 3", "option 4"],
    "correctAnswer": "A",
    "topic": "{topic}",
    "subject": "{subject}"
  }}
]"""

TEXT_GENERATION_PROMPT = """Generate exactly {count} multiple-choice questions on:
Subject: {subject}
Topic: {topic}

Each question must have 4 distinct options. "correctAnswer" is the letter (A-D) of the correct option.

Return ONLY a JSON array in this format:

{format}"""

IMAGE_GENERATION_PROMPT = """Extract {count} multiple-choice questions based ONLY on the attached images.

Each question must have 4 distinct options. "correctAnswer" is the letter (A-D) of the correct option.

Format (JSON ONLY):

{format}"""

FILE_GENERATION_PROMPT = """Using ONLY this content:

{content}

Generate exactly {count} multiple-choice questions. Each question must have 4 distinct options.
"correctAnswer" is the letter (A-D) of the correct option.

Return ONLY a JSON array in this format:

{format}"""

# =============================================================================
# TUTOR
# =============================================================================

EXPLAIN_PROMPT = """Question: {question}
User Selected: {selected}
Correct Answer: {correct}

Explain in 4 short sentences."""

STUDY_PLAN_PROMPT = """Based on this quiz history:

{summary}

Write a 3-step study plan under 120 words."""

NO_ANSWER_LABEL = "(no answer)"

"""
Prompt templates for the LLM-backed interview capability.
Each prompt is designed to:
1. Prevent chain-of-thought leaking
2. Keep the model out of pass/fail decisions
3. Produce clean, structured outputs
"""
from typing import List, Sequence


ROUND_FOCUS = {
    "SCREENING": "background, motivation, and how clearly they communicate",
    "TECHNICAL": "technical depth and correctness for the role",
    "SCENARIO": "judgment, trade-offs and decision-making in a realistic situation",
}


def _bullets(items: Sequence[str], empty: str = "None") -> str:
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


class Prompts:
    """Collection of all prompts."""

    # ============================================================
    # QUESTION GENERATION
    # ============================================================

    @staticmethod
    def generate_question(
        round_type: str,
        role: str,
        level: str,
        memory_summary: str,
        asked_questions: List[str],
        question_index: int,
        resume_summary: str = "",
    ) -> str:
        """Prompt for the next question of a round."""
        focus = ROUND_FOCUS.get(round_type, "the candidate's fit for the role")
        resume_block = f"\nRESUME HIGHLIGHTS:\n{resume_summary}\n" if resume_summary else ""

        return f"""You are Alex, interviewing a {level} {role} candidate.

CRITICAL RULES:
1. You ASK questions only. Do not evaluate or decide pass/fail.
2. No thinking or reasoning in your response.
3. Never repeat or rephrase a question from ALREADY ASKED.

ROUND: {round_type} (question {question_index + 1})
FOCUS: {focus}

WHAT WE KNOW SO FAR:
{memory_summary}
{resume_block}
ALREADY ASKED:
{_bullets(asked_questions)}

Your question (one sentence):"""

    # ============================================================
    # ANSWER EVALUATION
    # ============================================================

    @staticmethod
    def evaluate_answer(
        round_type: str,
        dimensions: Sequence[str],
        question: str,
        answer: str,
        memory_summary: str,
    ) -> str:
        """Prompt for scoring a candidate's answer."""
        score_lines = ",\n".join(f'    "{d}": <integer 0-10>' for d in dimensions)

        return f"""Evaluate this answer from a {round_type} interview round.

QUESTION: "{question}"
ANSWER: "{answer}"

WHAT WE KNOW SO FAR:
{memory_summary}

Score each dimension as an integer from 0 to 10. Do not decide pass/fail.
Respond with ONLY this JSON (no other text):

{{
{score_lines},
    "summary": "<one or two sentences on the answer>",
    "memoryHints": {{
        "strengths": ["<new strengths shown>"],
        "weaknesses": ["<new weaknesses shown>"],
        "notes": ["<facts worth remembering>"]
    }}
}}"""

    # ============================================================
    # RESUME ANALYSIS
    # ============================================================

    @staticmethod
    def analyze_resume(resume_text: str, target_role: str) -> str:
        """Prompt for extracting structured data from a resume."""
        return f"""Extract structured information from this resume for a {target_role} position.

RESUME:
{resume_text[:4000]}

Respond with ONLY this JSON:

{{
    "experience": ["<one entry per role>"],
    "skills": ["<technical skills>"],
    "education": ["<degrees and certifications>"],
    "summary": "<2 sentence summary>"
}}"""

    # ============================================================
    # PROFILE GENERATION
    # ============================================================

    @staticmethod
    def generate_profile(role: str, level: str, transcript: str) -> str:
        """Prompt for the post-screening candidate profile."""
        return f"""You are an expert recruiter. Write a short professional profile of a {level} {role} candidate
based on this screening transcript. Focus on communication, technical depth and fit.
Plain text only, no headings.

TRANSCRIPT:
{transcript}

Profile:"""


# ============================================================
# FALLBACK QUESTIONS (question bank per round)
# ============================================================

FALLBACK_QUESTIONS = {
    "SCREENING": [
        "Tell me about a time you collaborated across teams to deliver something.",
        "What drew you to apply for this role?",
        "Can you walk me through the project you are most proud of?",
        "What are you looking for in your next position?",
    ],
    "TECHNICAL": [
        "Explain how you would design a rate limiter for an API.",
        "How would you approach debugging a performance issue in production?",
        "How do you ensure code quality and maintainability in large codebases?",
        "Describe how you would model and index data for a high-traffic read path.",
    ],
    "SCENARIO": [
        "You discover latency spikes after a deployment. Walk through your approach.",
        "If you found a critical bug right before launch, what would you do?",
        "A stakeholder requests a feature that conflicts with your architecture. How do you respond?",
        "How would you prioritize multiple high-priority tasks with competing deadlines?",
    ],
}

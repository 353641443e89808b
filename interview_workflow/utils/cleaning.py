"""
Response cleaning utilities for LLM outputs.
Strips chain-of-thought blocks and stray formatting so only the interviewer's
question, or the JSON payload, is left.
"""
import re
from typing import Optional, Tuple


class ResponseCleaner:
    """
    Cleans raw completions before they reach the interview workflow.
    """

    THINK_BLOCK = re.compile(r'<think>.*?(?:</think>|$)', flags=re.DOTALL | re.IGNORECASE)
    STRAY_TAG = re.compile(r'</?\s*think\s*>', flags=re.IGNORECASE)

    QUESTION_WORDS = (
        'what', 'how', 'why', 'can', 'could', 'would',
        'tell', 'describe', 'explain', 'when', 'where', 'who', 'walk',
    )

    # Phrases that show the model is reasoning out loud instead of asking
    BAD_INDICATORS = (
        '<think', 'let me', 'i need to', 'i should', 'my reasoning',
        'the candidate', 'they said', 'okay,', 'alright,',
    )

    @classmethod
    def strip_reasoning(cls, text: str) -> str:
        if not text:
            return ""
        cleaned = cls.THINK_BLOCK.sub('', text)
        cleaned = cls.STRAY_TAG.sub('', cleaned)
        return cleaned.strip()

    @classmethod
    def extract_first_question(cls, text: str) -> Optional[str]:
        """Extract the first question from response."""
        for match in re.findall(r'[^.!?\n]*\?', text):
            match = match.strip()
            if len(match.split()) >= 3:
                return match
        return None

    @classmethod
    def is_valid_question(cls, text: str) -> bool:
        if not text or len(text) < 10:
            return False
        lowered = text.lower()
        return not any(indicator in lowered for indicator in cls.BAD_INDICATORS)

    @classmethod
    def clean_question(cls, text: str) -> Tuple[str, bool]:
        """
        Full cleaning pipeline for generated questions.

        Returns:
            Tuple of (cleaned_text, is_valid)
        """
        cleaned = cls.strip_reasoning(text)
        # Quotes, markdown emphasis and labels like "Question:"
        cleaned = re.sub(r'^\s*(?:question|interviewer)\s*:\s*', '', cleaned, flags=re.IGNORECASE)
        cleaned = cleaned.replace('**', '').strip().strip('"').strip()
        cleaned = re.sub(r'\s+', ' ', cleaned)

        if not cls.is_valid_question(cleaned):
            question = cls.extract_first_question(cls.strip_reasoning(text))
            if not question or not cls.is_valid_question(question):
                return "", False
            cleaned = question

        if not cleaned.endswith(('?', '!', '.')):
            if cleaned.lower().startswith(cls.QUESTION_WORDS):
                cleaned += '?'
            else:
                cleaned += '.'

        return cleaned, True

    @classmethod
    def clean_json_response(cls, text: str) -> str:
        """Clean response and extract the outermost JSON object (empty string if none)."""
        cleaned = cls.strip_reasoning(text)
        cleaned = re.sub(r'```(?:json)?', '', cleaned)

        start = cleaned.find('{')
        end = cleaned.rfind('}')
        if start == -1 or end < start:
            return ""
        return cleaned[start:end + 1]

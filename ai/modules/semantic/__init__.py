"""
Semantic processing: prompting the generative-language service for a
bulleted summary with flashcards.
"""
from .generator import ContentGenerator, generate_study_text, build_prompt, GeneratorError, GeneratorAPIError, GeneratorTimeoutError

__all__ = [
	'ContentGenerator', 'generate_study_text', 'build_prompt',
	'GeneratorError', 'GeneratorAPIError', 'GeneratorTimeoutError',
]

"""
quizmend - repair Multi-Select questions after a D2L to Canvas migration

Reads a D2L course export, finds the questions D2L marks as "Multi-Select",
matches them against the course's Canvas quizzes, and switches the ones
Canvas imported as single-answer multiple choice to multiple answers.
"""

__version__ = "1.0.0"
__license__ = "MIT"

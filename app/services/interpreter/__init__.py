"""LLM interpretation services.

Quick start:
    from app.services.interpreter import commit_summarizer

    summary = await commit_summarizer.summarize(commits)
    print(summary.overall_summary)
"""

from .base import (
    BaseInterpreter,
    InterpreterError,
    InterpreterNotConfiguredError,
    InterpreterParseError,
)
from .commit_summary import CommitSummarizer, commit_summarizer, strip_code_fence

__all__ = [
    "BaseInterpreter",
    "InterpreterError",
    "InterpreterNotConfiguredError",
    "InterpreterParseError",
    "CommitSummarizer",
    "commit_summarizer",
    "strip_code_fence",
]

"""AI-powered commit summarizer using Claude.

Turns a list of commits into a six-section JSON summary (themes, technical
areas, accomplishments, commit types, timeline highlights, overall summary).
"""

import json
import logging

from pydantic import ValidationError

from app.config import settings
from app.schemas.commit_summary import CommitSummary
from app.services.github.types import GitHubCommit
from app.services.interpreter.base import BaseInterpreter, InterpreterParseError

logger = logging.getLogger(__name__)

# Commits beyond this are left out of the prompt
MAX_COMMITS_IN_PROMPT = 400
MAX_MESSAGE_CHARS = 500


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json / ``` markdown fence, if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        # Remove first line (```json or ```)
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


class CommitSummarizer(BaseInterpreter[list[GitHubCommit], CommitSummary]):
    """Summarizes a set of commits for engineering managers and stakeholders."""

    temperature: float = 0.2

    def __init__(self, api_key: str | None = None):
        super().__init__(api_key)
        self.max_tokens = settings.summary_max_tokens

    def get_system_prompt(self) -> str:
        return """You analyze git commit history and summarize a developer team's work.

Respond with a single JSON object and nothing else, using exactly these keys:
{
  "keyThemes": ["3-5 short themes that describe the work"],
  "technicalAreas": [{"name": "area of the codebase", "count": <number of commits>}],
  "accomplishments": ["concrete things that were shipped or fixed"],
  "commitsByType": [{"type": "feature|fix|refactor|docs|test|chore|other", "count": <number>, "description": "one line"}],
  "timelineHighlights": [{"date": "YYYY-MM-DD", "description": "what happened"}],
  "overallSummary": "2-4 sentence narrative of the period"
}

RULES:
- Base every statement on the commit messages provided
- Prefer specific language over phrases like "various improvements"
- Counts must add up to no more than the number of commits given"""

    def format_input(self, input_data: list[GitHubCommit]) -> str:
        commits = input_data[:MAX_COMMITS_IN_PROMPT]
        if len(input_data) > len(commits):
            logger.info(
                f"Summarizing first {len(commits)} of {len(input_data)} commits"
            )

        records = [
            {
                "message": commit.message[:MAX_MESSAGE_CHARS],
                "date": commit.date,
                "author": commit.author_login or commit.author_name,
                "repository": commit.repository,
                "url": commit.url,
            }
            for commit in commits
        ]
        return (
            f"Summarize these {len(records)} commits:\n\n"
            f"{json.dumps(records, indent=2, ensure_ascii=False)}"
        )

    def parse_output(self, response_text: str) -> CommitSummary:
        text = strip_code_fence(response_text)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InterpreterParseError(
                f"Summary response is not valid JSON: {e}", raw_response=response_text
            ) from e

        try:
            return CommitSummary.model_validate(data)
        except ValidationError as e:
            raise InterpreterParseError(
                f"Summary response has an unexpected shape: {e.error_count()} error(s)",
                raw_response=response_text,
            ) from e

    async def summarize(self, commits: list[GitHubCommit]) -> CommitSummary:
        """Summarize commits; an empty list short-circuits without an API call."""
        if not commits:
            return CommitSummary.empty()
        return await self.interpret(commits)


# Singleton instance
commit_summarizer = CommitSummarizer()

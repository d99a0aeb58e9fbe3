"""
Artifact: paper_analyzer/orchestrators/research_orchestrator.py
Purpose: Holds the summarization and synthesis prompts and runs them against a chat model.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added summary and synthesis prompt chains with timing logs. (Paper Analyzer Team)
Preconditions:
- A LangChain chat model has been built from validated settings.
Inputs:
- Acceptable: Chunk text for summaries; ordered per-file summary blocks for synthesis.
- Unacceptable: Empty summary lists for synthesis.
Postconditions:
- Chunk summaries are returned as produced; the synthesis text is stripped.
Returns:
- `str` for both summarize and synthesize calls.
Errors/Exceptions:
- ValueError when synthesis is requested without summaries.
- Provider exceptions propagate unchanged; there is no retry.
"""

import time
from typing import Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from ..core.logging import get_logger

logger = get_logger("paper_analyzer.orchestrator")

SUMMARY_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "human",
            """\
Provide a brief summary (maximum 300 words) of the key points from this research paper section:

{paper_content}

Summary:""",
        ),
    ]
)

SYNTHESIS_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "human",
            """\
Based on the following research paper summaries:

{summaries}

In no more than {word_limit} words:
1. Identify one common theme or potential connection between the papers.
2. Generate {min_hypotheses} - {max_hypotheses} novel hypotheses that address a gap or build upon the collective findings.
3. Propose one experiment to test each of the hypotheses.

Provide your concise analysis:""",
        ),
    ]
)


def summarize_chunk(llm: BaseChatModel, paper_content: str) -> str:
    """Summarize one chunk of paper text."""
    chain = SUMMARY_PROMPT | llm | StrOutputParser()

    t0 = time.time()
    text = chain.invoke({"paper_content": paper_content})
    elapsed_ms = int((time.time() - t0) * 1000)
    logger.info("Chunk summary returned in %dms | in_chars=%d out_chars=%d", elapsed_ms, len(paper_content), len(text))

    return text


def synthesize_findings(
    llm: BaseChatModel,
    summaries: Sequence[str],
    min_hypotheses: int = 1,
    max_hypotheses: int = 3,
    word_limit: int = 500,
) -> str:
    """
    Ask the model for a cross-document analysis of the per-file summaries.

    `summaries` are the rendered `Summary for <file>:` blocks, joined with newlines
    so the model sees which paper each summary came from.
    """
    if not summaries:
        raise ValueError("No summaries available to synthesize.")

    chain = SYNTHESIS_PROMPT | llm | StrOutputParser()

    logger.info("Invoking synthesis over %d summaries…", len(summaries))
    t0 = time.time()
    text = chain.invoke(
        {
            "summaries": "\n".join(summaries),
            "word_limit": word_limit,
            "min_hypotheses": min_hypotheses,
            "max_hypotheses": max_hypotheses,
        }
    )
    elapsed_ms = int((time.time() - t0) * 1000)
    logger.info("Synthesis returned in %dms | words=%d", elapsed_ms, len(text.split()))

    return text.strip()

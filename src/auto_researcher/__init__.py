"""Auto Researcher - scheduled forum topics written by the Responses API.

On each run the script fills a prompt template with time and admin
variables, asks the OpenAI Responses API for content, waits for background
jobs to finish, asks for a short title, and posts the result as a new
forum topic.

Key components:
    - research: variables, templating, request building, polling, extraction
    - llm: Responses API clients (OpenAI, Azure OpenAI)
    - AutoResearcherScript: The end-to-end run against a Forum
    - CLI: Run or preview a script from a YAML field file

Quick start:
    # Install
    pip install auto-researcher

    # Preview the request without calling the API
    auto-researcher preview --config-file weekly.yaml

    # Run it
    OPENAI_API_KEY=sk-... auto-researcher run --config-file weekly.yaml --yes

    # See what was posted
    auto-researcher posts
"""

from .automation import (
    AutoResearcherScript,
    FileForum,
    Forum,
    RunResult,
    ScriptFields,
)

# LLM clients - lazy imports to avoid requiring the SDKs for request building
# Use: from auto_researcher.llm import create_llm_client, LLMConfig

__version__ = "0.1.0"

__all__ = [
    "AutoResearcherScript",
    "FileForum",
    "Forum",
    "RunResult",
    "ScriptFields",
    "__version__",
]

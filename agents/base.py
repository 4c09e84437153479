"""Base agent class for all role agents."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from integrations.github import GitHubError
from schemas.phase_results import RepoResult

if TYPE_CHECKING:
    from integrations.github import GitHubClient
    from shared_context import SharedContext


class AgentError(Exception):
    """Raised when a role agent cannot complete an operation.

    Carries the original upstream message so the team controller can
    report it unchanged.
    """


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM backends.

    Any LLM client implementing this protocol can be used with agents.
    """

    def chat(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        """Send messages and get response.

        Args:
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters (temperature, max_tokens, etc.)

        Returns:
            Assistant response content as string.
        """
        ...


class BaseAgent(ABC):
    """Abstract base class for role agents.

    Each agent follows the pattern:
    - Name and description for identification
    - System prompt (defines the role)
    - One LLM call per operation
    - Optional side effects through the shared context and GitHub

    Example:
        class MyAgent(BaseAgent):
            display_name = "My AI"

            def default_system_prompt(self) -> str:
                return "You are a helpful assistant."

            def greet(self) -> str:
                return self._chat("Hello")

        agent = MyAgent(llm=my_llm, name="my-agent")
        agent.greet()
    """

    # Name used as sender in the communication log
    display_name = "AI Agent"

    def __init__(
        self,
        llm: LLMProtocol,
        name: str | None = None,
        system_prompt: str | None = None,
        description: str | None = None,
        logger: logging.Logger | None = None,
        context: SharedContext | None = None,
        github: GitHubClient | None = None,
    ) -> None:
        """Initialize agent.

        Args:
            llm: LLM backend for inference (must implement LLMProtocol)
            name: Agent identifier (defaults to class name)
            system_prompt: Override default system prompt
            description: Human-readable description of agent's purpose
            logger: Optional logger instance
            context: Shared context for status, decisions and messages
            github: GitHub client for agents that push code
        """
        self.llm = llm
        self.name = name or self.__class__.__name__
        self.description = description or ""
        self.system_prompt = system_prompt or self.default_system_prompt()
        self.logger = logger or logging.getLogger(f"agent.{self.name}")
        self.context = context
        self.github = github

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"

    @abstractmethod
    def default_system_prompt(self) -> str:
        """Return the default system prompt for this agent.

        Returns:
            System prompt string.
        """
        ...

    def _build_messages(
        self,
        user_content: str | list[dict[str, str]],
        history: list[dict[str, str]] | None = None,
        system_prompt: str | None = None,
    ) -> list[dict[str, str]]:
        """Build message list for LLM call.

        Args:
            user_content: User message string or list of messages
            history: Optional conversation history
            system_prompt: Replaces the role prompt for this call only

        Returns:
            Complete message list with system prompt
        """
        messages: list[dict[str, str]] = [
            {"role": "system", "content": system_prompt or self.system_prompt}
        ]

        if history:
            messages.extend(history)

        if isinstance(user_content, str):
            messages.append({"role": "user", "content": user_content})
        else:
            messages.extend(user_content)

        return messages

    def _chat(
        self,
        user_content: str | list[dict[str, str]],
        history: list[dict[str, str]] | None = None,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a chat message with the system prompt.

        Args:
            user_content: User message string or list of messages
            history: Optional conversation history
            system_prompt: Replaces the role prompt for this call only
            **kwargs: Additional LLM parameters

        Returns:
            Assistant response content.

        Raises:
            AgentError: If the backend fails; the message is the backend's.
        """
        messages = self._build_messages(user_content, history, system_prompt)
        self.logger.debug("Sending %d messages to LLM", len(messages))
        try:
            return self.llm.chat(messages, **kwargs)
        except (ConnectionError, TimeoutError, RuntimeError) as e:
            self.logger.error("%s LLM call failed: %s", self.name, e)
            raise AgentError(str(e)) from e

    def _require_context(self) -> SharedContext:
        if self.context is None:
            raise AgentError(f"{self.name} needs a shared context")
        return self.context

    def _require_github(self) -> GitHubClient:
        if self.github is None:
            raise AgentError(f"{self.name} needs a GitHub client")
        return self.github

    def _log(self, recipient: str, message_type: str, content: str, priority: str = "normal") -> str | None:
        """Append to the communication log when a shared context is attached."""
        if self.context is None:
            return None
        return self.context.log_communication(self.display_name, recipient, message_type, content, priority)

    @contextmanager
    def _github_call(self, action: str) -> Iterator[None]:
        """Turn ``GitHubError`` into ``AgentError`` keeping the message."""
        try:
            yield
        except GitHubError as e:
            self.logger.error("%s failed: %s", action, e)
            raise AgentError(str(e)) from e

    def _ensure_repository(self, name: str, description: str = "") -> RepoResult:
        """Create ``name`` for the authenticated user, or reuse it if it exists."""
        github = self._require_github()
        with self._github_call(f"Create repository {name}"):
            try:
                data = github.create_repository(name, description=description)
                existed = False
            except GitHubError as e:
                if e.status_code != 422:
                    raise
                self.logger.info("Repository %s already exists, reusing it", name)
                data = github.get_repository(name)
                existed = True

        return RepoResult(
            name=data.get("name", name),
            full_name=data.get("full_name", name),
            url=data.get("html_url", ""),
            clone_url=data.get("clone_url"),
            default_branch=data.get("default_branch") or "main",
            already_existed=existed,
        )

    # --- Git workflow shared by the developer agents ---

    def create_git_branch(self, repo: str, branch: str) -> bool:
        """Create ``branch`` from the default branch; False if it already existed."""
        github = self._require_github()
        with self._github_call(f"Create branch {branch}"):
            created = github.create_branch(repo, branch)
        self._log("All Team", "branch_created", f"Branch {branch} ready in {repo}")
        return created

    def commit_code(self, repo: str, branch: str, files: dict[str, str], message: str) -> str:
        """Commit ``files`` (path -> content) to ``branch`` in one commit.

        Returns:
            SHA of the new commit.
        """
        if not files:
            raise AgentError("Nothing to commit")
        github = self._require_github()
        with self._github_call(f"Commit to {branch}"):
            sha = github.commit_files(repo, branch, files, message)
        self._log("All Team", "code_committed", f"{len(files)} files committed to {repo}:{branch}")
        return sha

    def create_pull_request(
        self,
        repo: str,
        branch: str,
        title: str,
        description: str = "",
        base: str = "main",
    ) -> dict[str, Any]:
        """Open a PR from ``branch``; returns ``number`` and ``url``."""
        github = self._require_github()
        with self._github_call(f"Open PR from {branch}"):
            pr = github.create_pull_request(repo, head=branch, title=title, body=description, base=base)
        self._log("DevOps AI", "pull_request_created", f"PR #{pr.get('number')} opened in {repo}: {title}")
        return {"number": pr.get("number"), "url": pr.get("html_url")}


FILE_BLOCK_PATTERN = re.compile(
    r"^(?:\*\*)?File:\s*`?([\w./@-]+)`?(?:\*\*)?\s*\n```[\w-]*\s*\n(.*?)```",
    re.MULTILINE | re.DOTALL,
)


def extract_files(text: str) -> dict[str, str]:
    """Collect ``File: <path>`` headed code blocks into a path -> content map.

    Later blocks for the same path win.
    """
    files: dict[str, str] = {}
    for path, content in FILE_BLOCK_PATTERN.findall(text or ""):
        files[path.lstrip("/")] = content.rstrip() + "\n"
    return files


def extract_code_block(text: str, language: str | None = None) -> str | None:
    """Return the first fenced code block in ``text`` (optionally of ``language``)."""
    if language:
        pattern = rf"```{language}\s*\n(.*?)```"
    else:
        pattern = r"```[\w-]*\s*\n(.*?)```"
    match = re.search(pattern, text, re.DOTALL | re.IGNORECASE)
    return match.group(1).strip() if match else None

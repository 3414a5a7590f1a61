"""Error taxonomy for tool dispatch and orchestration runs."""


class AgentError(Exception):
    """Base class for agent errors."""


class DuplicateToolName(AgentError):
    """A tool with the same name is already registered."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class ToolError(AgentError):
    """Failure tied to one tool call request."""

    def __init__(self, tool_name: str, tool_call_id: str | None, message: str):
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id
        super().__init__(message)


class UnknownTool(ToolError):
    """The model requested a tool that is not registered."""

    def __init__(self, tool_name: str, tool_call_id: str | None = None):
        super().__init__(tool_name, tool_call_id, f"Unknown tool: {tool_name}")


class InvalidArguments(ToolError):
    """Tool arguments failed schema validation; the handler was not run."""

    def __init__(self, tool_name: str, tool_call_id: str | None, details: str):
        self.details = details
        super().__init__(tool_name, tool_call_id, f"Invalid arguments for {tool_name}: {details}")


class HandlerError(ToolError):
    """The tool handler raised. The original exception is chained as ``__cause__``."""

    def __init__(self, tool_name: str, tool_call_id: str | None, original: BaseException):
        self.original = original
        detail = str(original) or original.__class__.__name__
        super().__init__(tool_name, tool_call_id, f"Tool {tool_name} failed: {detail}")


class MaxTurnsExceeded(AgentError):
    """The model kept requesting tools after the configured number of turns."""

    def __init__(self, max_turns: int):
        self.max_turns = max_turns
        super().__init__(f"Agent run exceeded the maximum of {max_turns} turns")


class ModelUnavailable(AgentError):
    """The chat model provider could not be reached or kept failing."""

    user_message = "The assistant is temporarily unavailable. Please try again later."

    def __init__(self, attempts: int, reason: str):
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Chat model unavailable after {attempts} attempt(s): {reason}")


class InvalidHistory(AgentError):
    """A tool message does not answer any earlier assistant tool call."""


class ProviderNotConfigured(AgentError):
    """An external provider has no credentials and fallback mode is strict."""

    def __init__(self, provider: str, env_var: str):
        self.provider = provider
        self.env_var = env_var
        super().__init__(f"{provider} is not configured (set {env_var})")

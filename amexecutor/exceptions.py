"""Exceptions raised while turning alerts into command executions."""


class AlertExecutorError(Exception):
    """Base exception for all alert executor errors"""

    def __init__(self, message: str | None = None) -> None:
        self.message = message or "Alert execution failed"
        super().__init__(self.message)


class ConfigurationError(AlertExecutorError):
    """Exception for an unreadable or invalid handlers configuration"""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid handlers configuration {path}: {reason}")


class UnterminatedQuoteError(AlertExecutorError):
    """Exception for a command line whose quote is never closed"""

    def __init__(self) -> None:
        super().__init__("Missing closing quote")


class TemplateRenderError(AlertExecutorError):
    """Exception for a command template that fails to parse or render"""

    def __init__(self, template: str, cause: Exception) -> None:
        self.template = template
        self.cause = cause
        super().__init__(f"Template \"{template}\" failed: {cause}")


class HandlerMissingError(AlertExecutorError):
    """Exception for a handler name absent from the configuration"""

    def __init__(self, handler: str) -> None:
        self.handler = handler
        super().__init__(f"Handler {handler} is not defined or missing from configuration")


class EmptyHandlerError(AlertExecutorError):
    """Exception for a handler annotation with no handler name in it"""

    def __init__(self) -> None:
        super().__init__("Empty handler annotation found in alert.")


class HandlerArgumentsError(AlertExecutorError):
    """Exception for a handler whose command line could not be built"""

    def __init__(self, cause: AlertExecutorError) -> None:
        self.cause = cause
        super().__init__(f"Could not parse handler arguments: {cause.message}")


class EmptyCommandError(AlertExecutorError):
    """Exception for a command template that renders to nothing"""

    def __init__(self) -> None:
        super().__init__("Script is empty, not running.")


class CommandError(AlertExecutorError):
    """Base exception for commands that could not be run to success"""

    def __init__(
        self, message: str, path: str, args: list[str] | None = None, output: bytes = b""
    ) -> None:
        self.path = path
        self.args_list = list(args or [])
        self.output = output
        super().__init__(message)


class CommandStartError(CommandError):
    """Exception for a command that could not be started"""

    def __init__(self, path: str, args: list[str], cause: OSError | ValueError) -> None:
        self.cause = cause
        super().__init__(f"Command {path} could not be started: {cause}", path, args)


class CommandTimeoutError(CommandError):
    """Exception for a command killed after exceeding its timeout"""

    def __init__(self, path: str, args: list[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__("Command execution timed out and was killed.", path, args)


class CommandExitError(CommandError):
    """Exception for a command that exited with a non-zero status"""

    def __init__(self, path: str, args: list[str], returncode: int, output: bytes) -> None:
        self.returncode = returncode
        if returncode < 0:
            message = f"Command {path} was terminated by signal {-returncode}"
        else:
            message = f"Command {path} exited with status {returncode}"
        super().__init__(message, path, args, output)


class RequestBodyTooLargeError(AlertExecutorError):
    """Exception for a webhook request body at or beyond the size limit"""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Request body too large, limit is {limit} bytes.")

"""Domain errors. Each one knows the HTTP status it maps to at the API boundary."""


class AgentPlatformError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AgentPlatformError):
    status_code = 400


class UnknownFieldError(ValidationFailed):
    def __init__(self, fields: list[str]):
        super().__init__(f"Unknown fields: {', '.join(sorted(fields))}")
        self.fields = fields


class AgentNotFoundError(AgentPlatformError):
    status_code = 404

    def __init__(self, agent_id: str):
        super().__init__("Agent not found")
        self.agent_id = agent_id


class AgentStateError(AgentPlatformError):
    status_code = 400


class UpstreamError(AgentPlatformError):
    """Provider call failed: non-2xx answer, transport failure or unusable body."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


class UnrecognizedResponseError(UpstreamError):
    pass


class GatewayConfigurationError(AgentPlatformError):
    pass

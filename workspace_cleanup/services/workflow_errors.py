"""Error types for workflow service operations."""


class WorkflowServiceError(RuntimeError):
    """Base class for workflow service failures."""


class WorkflowServiceConfigurationError(WorkflowServiceError):
    """Raised when required workflow service configuration is missing."""


class WorkflowServiceAPIError(WorkflowServiceError):
    """Raised when workflow service API calls fail."""

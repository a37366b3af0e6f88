class WorkflowRepositoryError(RuntimeError):
    """The workflow repository database could not be queried."""


class WorkflowNotFoundError(LookupError):
    """No workflow execution with the requested stat id."""

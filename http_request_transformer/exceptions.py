# Pipeline Exceptions


class PipelineError(Exception):
    """Base exception for all request pipeline errors."""

    def __init__(self, *args, handler_name: str | None = None, detail: str | None = None):
        super().__init__(*args)
        self.handler_name = handler_name
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class HandlerConfigurationError(ValueError, PipelineError):
    """Raised when a handler or pipeline is constructed with invalid arguments."""

    def __init__(self, *args, handler_name: str | None = None, detail: str | None = None):
        PipelineError.__init__(self, *args, handler_name=handler_name, detail=detail)


class NoInnerHandlerError(PipelineError):
    """Raised when a handler is asked to send a request before it has been bound into a pipeline."""

    pass


class RequestCancelledError(PipelineError):
    """Raised when a cancellation token is triggered while a request is in flight."""

    def __init__(self, detail: str = "The request was cancelled.", handler_name: str | None = None):
        super().__init__(detail, handler_name=handler_name, detail=detail)

"""
Webhook processing error taxonomy.

Every error carries a stable `code` (returned to callers as error_code) and the
HTTP status the transport layer should answer with.
"""


class WebhookError(Exception):
    """Base class for every expected processing failure."""
    code = 'WEBHOOK_ERROR'
    http_status = 500
    default_message = 'Webhook processing failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class WebhookNotFound(WebhookError):
    code = 'WEBHOOK_NOT_FOUND'
    http_status = 404
    default_message = 'Webhook not found'


class WebhookInactive(WebhookError):
    code = 'WEBHOOK_INACTIVE'
    http_status = 403
    default_message = 'Webhook is inactive'


class UnsupportedMode(WebhookError):
    code = 'UNSUPPORTED_MODE'
    http_status = 422

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Webhook is not in active mode (mode={mode!r})")


class NoMappingsConfigured(WebhookError):
    code = 'NO_MAPPINGS_CONFIGURED'
    http_status = 422
    default_message = 'No field mappings configured. Configure the mappings first.'


class MissingFieldError(WebhookError):
    code = 'MISSING_REQUIRED_FIELD'
    http_status = 422

    def __init__(self, field):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class RemoteProcessingError(WebhookError):
    """Primary remote procedure failed; the local fallback takes over."""
    code = 'REMOTE_PROCESSING_ERROR'
    http_status = 502
    default_message = 'Remote processing failed'


class DownstreamWriteError(WebhookError):
    code = 'DOWNSTREAM_WRITE_ERROR'
    http_status = 502
    default_message = 'Failed to write to the data store'


class InternalError(WebhookError):
    code = 'INTERNAL_ERROR'
    http_status = 500
    default_message = 'Internal processing error'

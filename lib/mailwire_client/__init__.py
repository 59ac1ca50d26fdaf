from .attachments import Attachment, BytesPayload, StreamPayload
from .config_types import CallOptions, ClientConfig
from .errors import ApiError, AuthError, MailwireClientError
from .form import FormData, create_form_data, urlencode_body
from .responses import ApiResponse
from .transport import RequestBuilder

__all__ = [
    "ApiError",
    "ApiResponse",
    "Attachment",
    "AuthError",
    "BytesPayload",
    "CallOptions",
    "ClientConfig",
    "FormData",
    "MailwireClientError",
    "RequestBuilder",
    "StreamPayload",
    "create_form_data",
    "urlencode_body",
]

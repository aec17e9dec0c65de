class SheetDashError(Exception):
    """Base exception for all sheetdash errors"""
    pass


class ConfigError(SheetDashError):
    """Missing or inconsistent global.json / environment configuration"""
    pass


class SchemaError(SheetDashError):
    """
    Column schema doesn't match what the table engine expects
    unknown column ids, duplicate fields, unknown filter kinds, etc
    """
    pass


class SheetFetchError(SheetDashError):
    """The spreadsheet values endpoint failed or returned an unexpected shape"""
    pass


class MessagingError(SheetDashError):
    """Base class for failures talking to the messaging API"""

    def __init__(self, message: str, status_code: int | None = None, response: object = None):
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class MediaUploadError(MessagingError):
    """The media upload round-trip failed; no message was sent"""
    pass


class SendError(MessagingError):
    """The template message request was rejected or could not be delivered"""
    pass

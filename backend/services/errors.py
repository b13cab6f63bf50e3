# services/errors.py


class VendorError(Exception):
    """
    Raised by an adapter when the vendor call failed.
    `message` is safe to show to the user; `detail` is for server logs only.
    """

    def __init__(self, message: str, detail: str = "", status: int = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status = status

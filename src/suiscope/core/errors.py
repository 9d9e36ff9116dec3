from typing import Optional


class SuiScopeError(Exception):
    pass


class RpcError(SuiScopeError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class TransportError(RpcError):
    pass


class ProtocolError(RpcError):
    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class NotFoundError(RpcError):
    pass

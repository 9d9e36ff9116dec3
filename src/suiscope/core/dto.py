from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RpcRequest:
    id: int
    method: str
    params: List[Any] = field(default_factory=list)

    def to_body(self) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": self.id,
            "method": self.method,
            "params": list(self.params),
        }


@dataclass(frozen=True)
class RpcResponse:
    id: Optional[int]
    result: Any = None
    error_code: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "RpcResponse":
        err = body.get("error")
        if err is not None:
            if isinstance(err, dict):
                code = err.get("code")
                message = str(err.get("message") or "API Error")
            else:
                code = None
                message = str(err)
            return cls(
                id=body.get("id"),
                error_code=code if isinstance(code, int) else None,
                error_message=message,
            )
        return cls(id=body.get("id"), result=body.get("result"))


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    stored_at: float        # monotonic ms

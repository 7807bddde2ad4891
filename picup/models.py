from typing import List, Optional
from pydantic import BaseModel

from picup.errors import ResponseCode


class PartResult(BaseModel):
    filename: str
    name: Optional[str] = None
    url: Optional[str] = None
    code: int = int(ResponseCode.OK)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code == ResponseCode.OK and self.url is not None


class UploadResponse(BaseModel):
    status: int = int(ResponseCode.OK)
    msg: str = "ok"
    data: Optional[List[PartResult]] = None

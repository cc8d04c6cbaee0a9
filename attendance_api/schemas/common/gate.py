from pydantic import BaseModel, Field

class GateScanRequest(BaseModel):
    code: str = Field(..., description="Decoded text read by the QR scanner")

class GateScanResponse(BaseModel):
    valid: bool

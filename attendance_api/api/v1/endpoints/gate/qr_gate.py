from fastapi import APIRouter, Response

from attendance_api.schemas.common.gate import GateScanRequest, GateScanResponse
from attendance_api.utils.qr_generator import QRGateService

router = APIRouter()

@router.get("/qr", response_class=Response)
async def get_gate_qr_code():
    """PNG of the code employees scan to open the attendance flow"""
    return Response(content=QRGateService().generate_qr_image(), media_type="image/png")

@router.post("/scan", response_model=GateScanResponse)
async def verify_gate_scan(body: GateScanRequest):
    return GateScanResponse(valid=QRGateService().verify(body.code))

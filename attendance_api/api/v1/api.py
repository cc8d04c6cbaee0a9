from fastapi import APIRouter
from attendance_api.api.v1.endpoints.biometric import passkey
from attendance_api.api.v1.endpoints.hr import attendance
from attendance_api.api.v1.endpoints.gate import qr_gate

api_router = APIRouter()

# Passkey ceremonies and employee session
api_router.include_router(passkey.router, prefix="/auth", tags=["Authentication"])

# Attendance records
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])

# QR gate
api_router.include_router(qr_gate.router, prefix="/gate", tags=["Gate"])

from attendance_api.models.hr.employee import Employee
from attendance_api.models.hr.attendance import AttendanceRecord
from attendance_api.models.biometric.webauthn_credential import WebAuthnCredential

import re
from attendance_api.core.config import settings


class EmployeeIdValidator:
    @staticmethod
    def pattern(prefix: str | None = None) -> re.Pattern:
        """PREFIX-<one capital letter><3-4 digits>, e.g. AFG-A001."""
        prefix = prefix or settings.EMPLOYEE_ID_PREFIX
        return re.compile(rf"^{re.escape(prefix)}-[A-Z]\d{{3,4}}$")

    @staticmethod
    def is_valid(employee_id: str | None, prefix: str | None = None) -> bool:
        if not employee_id:
            return False
        return bool(EmployeeIdValidator.pattern(prefix).match(employee_id))

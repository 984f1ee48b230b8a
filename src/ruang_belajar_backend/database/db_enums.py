'''
Static enums shared by the storage layer, the services and the API.
'''
import enum

# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]

class EntityKind(ListableEnum):
    """The four collections clients keep in sync. Values match the table names."""
    CLASSES = "classes"
    STUDENTS = "students"
    PAYMENTS = "payments"
    EXPENSES = "expenses"

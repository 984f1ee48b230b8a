from datetime import date
from uuid import UUID

# Wednesday; its week runs from Monday 8 to Sunday 14 January 2024
REFERENCE_DATE = date(2024, 1, 10)
MONDAY = date(2024, 1, 8)
TUESDAY = date(2024, 1, 9)
SUNDAY = date(2024, 1, 14)
NEXT_MONDAY = date(2024, 1, 15)
PREVIOUS_SUNDAY = date(2024, 1, 7)

PERIOD_KEY = "2024-01-08_2024-01-14"
PERIOD_LABEL = "8/1/2024 – 14/1/2024"

# never stored in any test database
MISSING_ID = UUID('0b8e4f3c-6d3a-4b8e-9b1e-5f2d7c9a1e42')

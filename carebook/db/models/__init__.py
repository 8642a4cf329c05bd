# Models package (re-export feature modules for stable imports)
from .directory.doctor import Doctor
from .directory.patient import Patient
from .scheduling.appointment import Appointment
from .scheduling.notification import Notification

__all__ = [
    "Doctor",
    "Patient",
    "Appointment",
    "Notification",
]

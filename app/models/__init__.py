from app.models.user import User
from app.models.clinic import Clinic
from app.models.slot import Slot
from app.models.appointment import Appointment
from app.models.followup import Followup

import re
import datetime as dt
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

_HH_MM_SS = re.compile(r"^\d{2}:\d{2}:\d{2}$")

def _to_hhmm(v):
    if isinstance(v, dt.time):
        return v.strftime("%H:%M")
    if isinstance(v, str):
        v = v.strip()
        if _HH_MM_SS.match(v):
            return v[:5]
    return v

# "09:00" (also accepts "09:00:00" and datetime.time)
TimeHHMM = Annotated[str, BeforeValidator(_to_hhmm), Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")]

class CreatedOut(BaseModel):
    id: str
    message: str

class MessageOut(BaseModel):
    message: str

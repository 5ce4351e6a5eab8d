# auth.py
from pydantic import BaseModel


class TokenData(BaseModel):
    student_id: int

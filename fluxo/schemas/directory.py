from pydantic import BaseModel

class AccountResponse(BaseModel):
    id: str
    name: str
    type: str

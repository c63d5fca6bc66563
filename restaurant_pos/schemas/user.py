from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal

Role = Literal["admin", "waiter", "kitchen"]

# Shared properties for user models
class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for privileged user creation requests
class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    role: Role

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be blank")
        return v

# Output schema for staff profiles
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: Role

# Schema for privileged user deletion requests
class UserDelete(BaseModel):
    user_id: int

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

# Result of the create-user function
class UserCreatedResponse(BaseModel):
    message: str
    user: UserResponse

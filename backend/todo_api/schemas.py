from __future__ import annotations

from pydantic import BaseModel


class AuthIn(BaseModel):
    username: str
    password: str


class SignupIn(BaseModel):
    username: str
    email: str
    password: str


# never carries password_hash
class UserOut(BaseModel):
    id: int
    username: str
    email: str
    created_at: int


class TodoCreate(BaseModel):
    title: str


class TodoToggle(BaseModel):
    completed: bool


class TodoOut(BaseModel):
    id: int
    title: str
    completed: bool
    created_at: int
    updated_at: int
    user_id: int


class DeleteOut(BaseModel):
    deleted: bool


class OkOut(BaseModel):
    ok: bool

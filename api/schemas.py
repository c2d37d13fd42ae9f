"""Pydantic schemas for RPC request/response validation."""

from pydantic import BaseModel, ConfigDict, Field


class Blog(BaseModel):
    """Wire-level blog record.

    ``id`` is empty on create requests and always set on responses.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    author_id: str
    title: str
    content: str


class CreateBlogRequest(BaseModel):
    blog: Blog


class CreateBlogResponse(BaseModel):
    blog: Blog


class ReadBlogRequest(BaseModel):
    blog_id: str


class ReadBlogResponse(BaseModel):
    blog: Blog


class UpdateBlogRequest(BaseModel):
    blog: Blog


class UpdateBlogResponse(BaseModel):
    blog: Blog


class DeleteBlogRequest(BaseModel):
    blog_id: str


class DeleteBlogResponse(BaseModel):
    blog_id: str


class ErrorResponse(BaseModel):
    """Body of every failed RPC."""

    code: str = Field(description="INVALID_ARGUMENT, NOT_FOUND, INTERNAL, ...")
    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str

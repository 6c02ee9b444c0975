"""
Pydantic schemas for the image analysis and image generation endpoints

Field names follow the camelCase wire format used by the web client.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class AnalyzeImageRequest(BaseModel):
    """Request body for POST /api/analyze-image"""

    image: Optional[str] = Field(default=None, description="Data URL or bare base64 payload")


class AnalyzeImageResponse(BaseModel):
    """Room analysis; structured fields are best-effort, analysis is always present"""

    roomType: Optional[str] = None
    style: Optional[str] = None
    lighting: Optional[str] = None
    colors: Optional[List[str]] = None
    suggestions: Optional[List[str]] = None
    analysis: str


class ProductReference(BaseModel):
    """Product details forwarded to the image generator"""

    name: str
    description: str
    imageUrl: Optional[str] = None


class GenerateImageRequest(BaseModel):
    """Request body for POST /api/generate-image"""

    image: Optional[str] = None
    prompt: Optional[str] = None
    products: List[ProductReference] = Field(default_factory=list)
    analysis: Optional[str] = None


class GenerateImageResponse(BaseModel):
    """Generated visualization"""

    imageUrl: str
    analysis: str


class ErrorResponse(BaseModel):
    """Error body returned by both endpoints"""

    error: str

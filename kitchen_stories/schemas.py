"""Pydantic schemas for the Kitchen Stories API.

Request/response models for:
- Recipe list rows and detail views (grouped ingredients, ordered steps)
- Child payloads submitted as JSON text inside multipart forms
- Write acknowledgements
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Child payloads ---

class IngredientGroupIn(BaseModel):
    group: Optional[str] = ""
    items: list[str] = Field(default_factory=list)


class RecipeFields(BaseModel):
    """Scalar fields shared by create and replace."""
    title: str
    description: str
    category: str
    difficulty: str
    prep_time: str
    cook_time: str
    servings: str
    total_time: Optional[str] = None
    notes: Optional[str] = None


# --- Recipe ---

class IngredientGroupOut(BaseModel):
    group: str
    items: list[str]


class RecipeListOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    category: str
    difficulty: str
    prep_time: str
    cook_time: str
    total_time: Optional[str]
    servings: str
    image_url: Optional[str]
    notes: Optional[str]
    is_favorite: bool
    created_at: datetime
    updated_at: datetime


class RecipeOut(RecipeListOut):
    ingredients: list[IngredientGroupOut] = []
    instructions: list[str] = []


# --- Write acknowledgements ---

class RecipeWriteResult(BaseModel):
    message: str
    recipeId: int
    image_url: Optional[str] = None


class RecipeDeleteResult(BaseModel):
    message: str
    deletedId: int


class FavoriteToggleResult(BaseModel):
    message: str
    is_favorite: bool


class ReadyOut(BaseModel):
    ok: bool
    db_ok: bool

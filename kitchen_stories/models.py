"""SQLAlchemy ORM models for Kitchen Stories.

Tables:
- recipes: Catalog entries (scalar fields, image reference, favorite flag)
- ingredients: Grouped ingredient lines owned by a recipe
- instructions: Numbered steps owned by a recipe
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    Boolean,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import false

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Recipe(Base):
    """Top-level catalog entry."""
    __tablename__ = "recipes"
    __table_args__ = (
        Index("ix_recipes_category", "category"),
        Index("ix_recipes_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(80), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(40), nullable=False)

    # Free text, e.g. "10 mins", "24 cookies"
    prep_time: Mapped[str] = mapped_column(String(80), nullable=False)
    cook_time: Mapped[str] = mapped_column(String(80), nullable=False)
    total_time: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    servings: Mapped[str] = mapped_column(String(80), nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_favorite: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Relationships
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[RecipeIngredient.sort_order, RecipeIngredient.id]",
    )
    instructions: Mapped[list["RecipeInstruction"]] = relationship(
        "RecipeInstruction", back_populates="recipe", cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RecipeInstruction.step_number",
    )


class RecipeIngredient(Base):
    """One ingredient line; an empty group label means ungrouped."""
    __tablename__ = "ingredients"
    __table_args__ = (
        Index("ix_ingredients_recipe_id", "recipe_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_group: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, default="")
    ingredient_text: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")


class RecipeInstruction(Base):
    """Ordered cooking step; numbers run 1..N within a recipe."""
    __tablename__ = "instructions"
    __table_args__ = (
        Index("ix_instructions_recipe_id", "recipe_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    instruction_text: Mapped[str] = mapped_column(Text, nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="instructions")
